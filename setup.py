from setuptools import setup, find_packages

setup(
    name="dropbox-cli",
    version="0.1.0",
    description="Self-contained CLI for Dropbox files, shared links and Paper documents",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=["InquirerPy", "tqdm"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "dropbox=dropbox_cli.__main__:main",
        ]
    },
)
