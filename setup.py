from setuptools import find_packages, setup

# Instalación:
#   pip install -e .[test]
#   farmacia-reports            (API en el puerto 8000)

setup(
    name='FarmaciaReports',
    version='1.0.0',
    description="Motor de reportes PDF/CSV/JSON de Farmacias Brasil",
    author='Farmacias Brasil',
    author_email='contact@example.com',
    url='https://example.com/FarmaciaReports',
    packages=find_packages(include=['farmacia_reports', 'farmacia_reports.*']),
    python_requires='>=3.10',
    install_requires=[
        'fastapi>=0.110',
        'uvicorn>=0.27',
        'pydantic>=2.5',
        'reportlab>=4.0',
        'Pillow>=10.0',
    ],
    extras_require={
        'test': ['pytest>=7.4', 'httpx>=0.27'],
    },
    entry_points={
        'console_scripts': ['farmacia-reports=farmacia_reports.app:main'],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
)
