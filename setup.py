from setuptools import setup, find_packages

setup(
    name='dx_core',
    version='1.0.0',
    description='CSV ingestion and aggregation engine for the US Data Explorer (elections, EV registrations, border crossings)',
    packages=find_packages(exclude=['tests', 'tests.*']),
    py_modules=['dxapp'],
    install_requires=['pandas>=2.0.0,<3', 'numpy>=1.25.0', 'xlsxwriter>=3.0.0', 'requests>=2.28.0'],
    extras_require={'test': ['pytest>=7.0', 'openpyxl>=3.1.0']},
    python_requires='>=3.9',
)
