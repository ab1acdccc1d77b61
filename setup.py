from setuptools import setup, find_packages

setup(
    name='autodocs-utils',
    version='0.1.0',
    py_modules=['autodocs', 'analyzer'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'lark>=1.2.2,<1.3',
        'pydantic',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'autodocs = autodocs:main',
        ],
    },
)
