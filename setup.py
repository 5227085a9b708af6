from setuptools import setup, find_packages
setup(
    name="feat_match",
    version="0.1.0",
    packages=find_packages("src"),   # finds featmatch, featmatch.features
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "opencv-contrib-python<5",   # cv2 incl. xfeatures2d (BRIEF, FREAK)
        "pyyaml",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "featmatch=featmatch.cli:main",
        ],
    },
)
