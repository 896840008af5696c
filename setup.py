"""
OptGoal
Setup configuration for the reservoir release goal-programming package.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

# Read requirements
def read_requirements(filename):
    """Read requirements from file."""
    with open(this_directory / filename, 'r') as f:
        return [line.strip() for line in f 
                if line.strip() and not line.startswith('#')]

# Core requirements
install_requires = read_requirements('requirements.txt')

# Development requirements
extras_require = {
    'dev': read_requirements('requirements-dev.txt'),
    'gurobi': ['gurobipy>=10.0'],
}

setup(
    name="optgoal",
    version="0.1.0",
    author="OptGoal Team",
    description="Reservoir release scheduling with goal programming and LP solvers",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=['tests*', 'examples*', 'docs*']),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Developers",
        "Topic :: Scientific/Engineering :: Hydrology",
        "Topic :: Scientific/Engineering :: Mathematics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        'console_scripts': [
            'optgoal=optgoal.cli:main',
            'optgoal-validate=optgoal.cli:validate',
        ],
    },
    include_package_data=True,
    package_data={
        'optgoal': [
            'data/*.csv',
        ],
    },
    zip_safe=False,
    keywords='reservoir water release goal programming linear programming optimization',
)
