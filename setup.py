from setuptools import setup

version = '0.1'

with open("README.md", "r", encoding="utf-8") as f:
    long_descr = f.read()

setup(
    name='pylwrp',
    packages=['pylwrp'],
    version=version,
    license='Apache 2.0',
    description='Control Livewire audio devices over LWRP',
    long_description=long_descr,
    long_description_content_type='text/markdown',
    author='pylwrp contributors',
    keywords=['Livewire', 'LWRP', 'Axia', 'Audio over IP'],
    python_requires='>=3.10',
    install_requires=[],
    extras_require={
        'test': [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Topic :: Multimedia :: Sound/Audio',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3.10'
    ],
)
