from setuptools import find_packages, setup

tests_require = [
    "pytest>=7.0",
    "pytest-mock>=3.10",
    "pytest-httpbin>=2.0",
    "gentools>=1.2",
    "requests>=2.28",
    "aiohttp>=3.8",
    "httpx>=0.24",
]

setup(
    name="activexml",
    version="1.0.0",
    description="Remote REST+XML resources as local python objects",
    license="MIT",
    author="activexml developers",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    install_requires=[
        "lxml>=4.9",
        "toolz>=0.12",
    ],
    extras_require={
        "aiohttp": ["aiohttp>=3.8"],
        "requests": ["requests>=2.28"],
        "httpx": ["httpx>=0.24"],
        "test": tests_require,
    },
    keywords=[
        "activeresource",
        "rest",
        "xml",
        "http",
        "api-client",
        "async",
    ],
    python_requires=">=3.8",
    package_dir={"": "src"},
    packages=find_packages("src"),
)
