"""Client-side state layer consumed by the presentation code."""
