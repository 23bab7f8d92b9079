from setuptools import setup, find_packages

setup(
    name="grant-rigor",
    version="0.1.0",
    description="Deterministic completeness, statistical-rigor and claim-integrity scoring for grant applications",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    py_modules=["cli", "engine", "pipeline_runner"],
    package_data={"config": ["*.yaml"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0",
        "pyyaml>=6.0",
        "python-docx>=0.8.11",
        "pypdf>=3.0",
        "beautifulsoup4>=4.12",
        "lxml>=4.9",
        "structlog>=23.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "grant-rigor=cli:main",
        ],
    },
)
