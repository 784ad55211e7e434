# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="ostree-coswid",
    version="0.1.0",
    description="Generate CoSWID tags describing the file tree of an OSTree commit",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["ostree_coswid*"]),
    python_requires=">=3.9",
    install_requires=[
        "cbor2>=5,<6",
    ],
    extras_require={
        "ostree": ["PyGObject"],  # OSTree store backend via gobject-introspection
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'ostree-coswid=ostree_coswid.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX :: Linux",
    ],
)
