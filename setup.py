from setuptools import setup, find_packages

setup(
    name="snow-incident",
    version="0.1.0",
    description="ServiceNow Table API client for incidents and users",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "python-dotenv>=1.0.0",
        "httpx>=0.25.1",
        "pydantic>=2.4.2",
        "pydantic-settings>=2.0.0",
        "tenacity>=8.2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
            "black>=23.0.0",
            "isort>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "snow-incident=snow_incident.cli:main",
        ],
    },
)
