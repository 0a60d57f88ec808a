import os

from setuptools import find_packages, setup

# Modules to compile
# Only the pure model and rendering modules, which carry no dynamic imports.
modules = [
    "nino/dot.py",
    "nino/resolver.py",
    "nino/inference.py",
]

# Compilation is opt-in (NINO_MYPYC=1) so that 'pip install -e .' stays pure Python.
ext_modules = []
if os.environ.get("NINO_MYPYC") == "1":
    try:
        from mypyc.build import mypycify

        ext_modules = mypycify(modules)
    except (ImportError, RuntimeError):
        # Fallback to pure Python if mypyc is not present or fails
        ext_modules = []

setup(
    name="nino",
    version="0.1.0",
    description="Transformation plan viewer for LINO/PIMO workspaces",
    python_requires=">=3.9",
    packages=find_packages(include=["nino", "nino.*"]),
    package_data={"nino": ["templates/*.j2"]},
    include_package_data=True,
    install_requires=[
        "pydantic>=2.6",
        "pyyaml>=6.0",
        "rich>=13.0",
        "jinja2>=3.1",
        "matplotlib>=3.7",
        "fastapi>=0.110",
        "uvicorn>=0.27",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "httpx>=0.27",
        ],
    },
    entry_points={
        "console_scripts": [
            "nino=nino.cli.main:main",
        ],
    },
    ext_modules=ext_modules,
)
