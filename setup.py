from setuptools import setup, find_packages


setup(
    name="oldcpio",
    version="0.1",
    packages=find_packages(include=["oldcpio", "oldcpio.*"]),
    description="Reader for old portable ASCII cpio (odc, magic 070707) archives.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[],
)
