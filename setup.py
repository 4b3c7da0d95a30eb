"""
Setup script for find-the-ball package with optional Cython compilation.

This builds the internal modules (_engine, _oracle, _shared) as compiled
extensions, while keeping the public API (oracle.py, config.py, errors.py,
types.py, runner.py, cli.py) as readable Python source.
"""

from setuptools import setup, find_packages, Extension
import glob
import os

# Check if Cython is available
try:
    from Cython.Build import cythonize
    USE_CYTHON = True
except ImportError:
    USE_CYTHON = False
    print("Cython not found. Building without compilation (source only).")

# Internal modules to compile with Cython
CYTHON_MODULES = [
    path
    for pattern in (
        "src/find_the_ball/_engine/*.py",
        "src/find_the_ball/_oracle/*.py",
        "src/find_the_ball/_shared/*.py",
    )
    for path in sorted(glob.glob(pattern))
    if not path.endswith("__init__.py")
]


def get_extensions():
    """Build Extension objects for Cython compilation."""
    if not USE_CYTHON:
        return []

    extensions = []
    for module_path in CYTHON_MODULES:
        # src/find_the_ball/_engine/engine.py -> find_the_ball._engine.engine
        module_name = module_path.replace("src/", "").replace("/", ".").replace(".py", "")
        extensions.append(
            Extension(
                name=module_name,
                sources=[module_path],
            )
        )
    return extensions


def get_ext_modules():
    """Get extension modules, cythonized if Cython is available."""
    extensions = get_extensions()
    if not extensions:
        return []

    return cythonize(
        extensions,
        compiler_directives={
            "language_level": "3",
            "boundscheck": False,
            "wraparound": False,
        },
        nthreads=os.cpu_count() or 1,
    )


# Only compile when explicitly requested; editable installs stay pure Python
ext_modules = get_ext_modules() if USE_CYTHON and os.environ.get("FIND_THE_BALL_CYTHON") else []

setup(
    name="find-the-ball",
    version="1.0.0",
    description="Find the ball - single-round guessing game engine with a remote position oracle",
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    ext_modules=ext_modules,
    install_requires=[
        "requests>=2.28",
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
        "dev": [
            "cython>=3.0",
            "build",
            "wheel",
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "find-the-ball=find_the_ball.cli:main",
        ],
    },
    package_data={
        "find_the_ball": ["*.so", "*.pyd"],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Cython",
    ],
)
