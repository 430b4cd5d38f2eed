import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="PyKA",
    version="0.1.0",
    author="PyKA developers",
    description="Krylov (Arnoldi) aggregation of large discrete-time Markov chains in Python",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    install_requires=['scipy','numpy','tqdm'],
    extras_require={'test': ['pytest']},
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.6',
)
