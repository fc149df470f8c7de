import setuptools
from umitag.__init__ import __VERSION__

with open("README.md", "r") as fh:
    long_description = fh.read()

with open('requirements.txt') as fp:
    install_requires = fp.read()

entry_dict = {
        'console_scripts': ['umitag=umitag.umitag:main'],
}


setuptools.setup(
    name="umitag",
    version=__VERSION__,
    description="Tag paired-end FASTQ read names with UMIs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.8',
    include_package_data=True,
    package_data={'umitag': ['templates/html/*/*.html']},
    entry_points=entry_dict,
    install_requires=install_requires,
    extras_require={'test': ['pytest']},
)
