# setup.py
from setuptools import setup, find_packages

install_requires = [
    # --- STATE & STORAGE ---
    "duckdb>=0.10.0",
    "pydantic>=2.0.0",

    # --- CONFIGURATION ---
    "python-dotenv>=1.0.0",
    "pyyaml>=6.0.0",
]

extras_require = {
    # --- TESTS---
    "test": [
        "pytest",
        "pytest-asyncio>=0.23",
    ],
}

setup(
    name="tally-widget",
    version="0.3.0",
    description="Tally | home-screen counter widget sync core",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"tally.shared.config": ["settings/*.yaml"]},
    include_package_data=True,
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={"console_scripts": ["tally=tally.main:main"]},
    python_requires=">=3.11",
)
