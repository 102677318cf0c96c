from setuptools import setup, find_packages

setup(
    name="lifegrid",
    version="0.1",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    description="Grass-prey-predator gridworld: a single-stepped ecosystem simulation with random actor selection and transactional action commits.",
    python_requires=">=3.8",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
