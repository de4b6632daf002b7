# setup.py
from setuptools import setup, find_packages

install_requires = [
    # --- STATE & CONFIG ---
    "pydantic>=2.0.0",
    "pyyaml>=6.0.0",
    "python-dotenv>=1.0.0",

    # --- PERSISTENCE ---
    "duckdb>=0.10.0",
]

extras_require = {
    # --- TESTS ---
    "test": [
        "pytest",
        "pytest-asyncio==1.3.0",
    ],
}

setup(
    name="keeper-state",
    version="0.1.0",
    description="Keeper | client-side session and preference state",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    package_data={"keeper": ["shared/config/settings/*.yaml"]},
    install_requires=install_requires,
    extras_require=extras_require,
    python_requires=">=3.11",
)
