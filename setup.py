import os

from setuptools import setup, find_packages


def _read_long_description():
    if os.path.exists("README.md"):
        with open("README.md", encoding="utf-8") as f:
            return f.read()
    return ""


setup(
    name="job-scanner-admin",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "python-dotenv>=0.19.0",
        "requests>=2.26.0",
        "apscheduler>=3.9.0,<4.0",
        "streamlit>=1.37.0",
        "pandas>=1.3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    python_requires=">=3.9",
    author="Christo Strydom",
    author_email="christo.strydom@gmail.com",
    description="Administrative front end for the job scanner scraping service",
    long_description=_read_long_description(),
    long_description_content_type="text/markdown",
)
