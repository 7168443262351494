from setuptools import setup, find_packages

setup(
    name="nwis-retrieval",
    version="0.1.0",
    description="USGS NWIS hydrologic data retrieval (instantaneous values, peaks, ratings, measurements, groundwater levels)",
    author="onWater Engineering Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.28",
        "pandas>=2.0",
        "numpy>=1.24",
        "pydantic>=2.0",
        "python-dotenv>=1.0",
        "pytz>=2023.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
)
