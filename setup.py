"""The setup script."""
from setuptools import setup, find_packages


def read_requirements(path: str) -> list:
    with open(path) as f:
        return [
            line.strip()
            for line in f
            if line.strip() and not line.strip().startswith("#")
        ]


with open('README.rst') as readme_file:
    readme = readme_file.read()

setup(
    name='anvil-web3',
    python_requires='>=3.9',
    version='0.1',
    description="Python helpers for the Anvil development node JSON-RPC API",
    long_description=readme,
    long_description_content_type="text/x-rst",
    packages=find_packages(include=['anvil_web3', 'anvil_web3.*']),
    include_package_data=True,
    install_requires=read_requirements('requirements.txt'),
    extras_require={"test": read_requirements('requirements_dev.txt')},
    license="MIT license",
    zip_safe=False,
    keywords='anvil, foundry, ethereum, json-rpc',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
    ],
)
