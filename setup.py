from setuptools import setup, find_packages
import re

VERSIONFILE="asysftp/_version.py"
verstrline = open(VERSIONFILE, "rt").read()
VSRE = r"^__version__ = ['\"]([^'\"]*)['\"]"
mo = re.search(VSRE, verstrline, re.M)
if mo:
    verstr = mo.group(1)
else:
    raise RuntimeError("Unable to find version string in %s." % (VERSIONFILE,))

setup(
	name="asysftp",
	version=verstr,
	author="Tamas Jos",
	author_email="info@skelsecprojects.com",

	packages=find_packages(exclude=["tests*"]),
	include_package_data=True,
	url="https://github.com/skelsec/asysftp",

	zip_safe = True,
	#
	# license="LICENSE.txt",
	description="Asynchronous SFTP client session engine",
	long_description="",
	python_requires='>=3.7',
	classifiers=(
		"Programming Language :: Python :: 3.7",
		"Operating System :: OS Independent",
	),
	install_requires=[
		'asysocks>=0.2.0',
	],
	extras_require={
		'test': [
			'pytest>=7.0',
			'pytest-asyncio>=0.21',
		],
	},
)
