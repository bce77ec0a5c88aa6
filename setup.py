import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="toncore",
    version="0.1.0",
    description="TON Blockchain cells, bag of cells, TL-B schemes and wallets",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages('.', exclude=['tests', 'tests.*']),
    classifiers=[
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Software Development :: Libraries",
    ],
    python_requires='>=3.9',
    install_requires=[
        "bitarray>=2.6.0",
        "pynacl>=1.5.0",
        "mnemonic>=0.20",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
