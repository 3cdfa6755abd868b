from setuptools import setup, find_packages

setup(
    name='kubeletdefaults',
    version='0.1.0',
    packages=find_packages(include=['kubeletdefaults', 'kubeletdefaults.*']),
    include_package_data=True,
    install_requires=[
        'typer',
        'pydantic>=2',
        'PyYAML',
        'python-dotenv',
        'jsonschema',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'kubeletdefaults=kubeletdefaults.cli:app'
        ]
    },
    description='Computes kubelet command-line flag defaults for every node profile of a cluster specification',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
