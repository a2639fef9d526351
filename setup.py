"""Setuptools configuration for the e-portfolio application."""

from pathlib import Path

from setuptools import find_packages, setup


ROOT = Path(__file__).resolve().parent


def read_requirements(file_name: str):
    """Return the pinned packages listed in ``file_name``, skipping comments."""

    path = ROOT / file_name
    if not path.is_file():
        return []
    lines = (line.strip() for line in path.read_text(encoding="utf-8").splitlines())
    return [line for line in lines if line and not line.startswith("#")]


setup(
    name="eportfolio",
    version="0.1.0",
    description="Single-user e-portfolio web application",
    long_description=(ROOT / "README.md").read_text(encoding="utf-8"),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["eportfolio", "eportfolio.*"]),
    include_package_data=True,
    package_data={
        "eportfolio": [
            "templates/*.html",
            "static/*.css",
            "seed_data/*.json",
        ]
    },
    install_requires=read_requirements("requirements.txt"),
    extras_require={
        "test": read_requirements("requirements-test.txt"),
        "docs": ["sphinx"],
    },
    python_requires=">=3.9",
)
