from setuptools import setup, find_packages
from bgzfseek.__version import __version__

with open('README.md') as readme:
    setup(
        name='bgzfseek',
        version=__version__,
        packages=find_packages(exclude=('tests', 'tests.*')),
        long_description=readme.read(),
        long_description_content_type='text/markdown',
        license='MIT',
        description='Random access reader for BGZF compressed files',
        python_requires='>=3.8',
        extras_require={'test': ['pytest']},
        include_package_data=True
    )
