from setuptools import setup, find_packages

setup(
    name="pyrilt",
    version="0.1.0",
    author="Adrien Rousseau",
    description="Regularized Inverse-Laplace Toolbox: Tikhonov/NNLS inversion with L-curve and GCV",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "scipy",
        "lmfit",
        "jaxopt",
        "jax",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
