from setuptools import setup

setup(
    name='atmfjstc-zip-reader',
    version='1.0.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=['atmfjstc.lib.zip_reader'],

    install_requires=[
        'atmfjstc-archive-forensics>=0.4.1, <1',
        'atmfjstc-iso-timestamp>=1.1.0, <2',
        'atmfjstc-binary-utils>=1.2.0, <2',
        'atmfjstc-os-forensics>=0.2.1, <2',
    ],

    extras_require={
        'test': ['pytest'],
    },

    zip_safe=True,

    description="Read-only decoder for in-memory ZIP archives with lazy entry decompression",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: System :: Archiving",
        "Typing :: Typed",
    ],
    python_requires='>=3.7',
)
