# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import re
from os import path

from setuptools import setup

this_directory = path.abspath(path.dirname(__file__))
with open(path.join(this_directory, "README.MD"), encoding="utf-8") as f:
    long_description = f.read()

# the package is not importable at build time, so the version is read off the source
init_path = path.join(this_directory, "pagecursor", "__init__.py")
with open(init_path, encoding="utf-8") as f:
    version_match = re.search(r'^_PACKAGE_VERSION = "([^"]+)"', f.read(), re.M)
if version_match is None:
    raise RuntimeError("Unable to find the package version.")
__version__ = version_match.group(1)

install_requires = [
    req_line.strip()
    for req_line in open(path.join(this_directory, "requirements.txt")).readlines()
    if req_line.strip() != ""
    if req_line.strip()[0] != "#"
    if "-e ." not in req_line
]

tests_require = [
    "httpx>=0.25.2",
    "pytest>=8.0.0",
    "pytest-asyncio>=0.23.0",
    "pytest-httpserver>=1.0.8",
    "pytest-testdox>=3.1.0",
    "werkzeug>=2.0.0",
]

setup(
    name="pagecursor",
    packages=[
        "pagecursor",
        "pagecursor.settings",
        "pagecursor.utils",
    ],
    package_data={"pagecursor": ["py.typed"]},
    version=__version__,
    license="Apache license 2.0",
    description="A generic cursor for consuming paginated APIs and database queries",
    long_description=long_description,
    long_description_content_type="text/markdown",
    keywords=["pagination", "cursor", "iterator"],
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require={"test": tests_require},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
