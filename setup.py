from setuptools import setup
from setuptools import find_namespace_packages


setup(
    name='Saiph',
    version='0.1',
    description='A cycle-accurate 5-stage pipeline simulator',
    license='BSD',
    python_requires='>=3.8',
    install_requires=['amaranth>=0.5,<0.6', 'PyYAML'],
    extras_require={'test': ['pytest']},
    packages=find_namespace_packages(include=['saiph', 'saiph.*']),
    py_modules=['cli'],
    data_files=[('configurations', ['configurations/saiph_small.yml',
                                    'configurations/saiph_default.yml',
                                    'configurations/saiph_large.yml'])]
)
