"""Setup gait util package."""

from setuptools import setup, find_namespace_packages


# Read requirements from requirements.txt
def read_requirements(file_path):
    with open(file_path, "r") as f:
        return f.read().splitlines()


setup(
    name="gait_util",
    version="0.1",
    packages=find_namespace_packages(include=["gait_util*"]),
    install_requires=read_requirements("requirements.txt"),
)
