#
# Copyright 2024 sodbuild Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

"""
Download and extract a libsodium source release.

Please visit https://github.com/jedisct1/libsodium/releases for versions.
"""

import os
import shutil
import tarfile

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from sodbuild.build_scripts.build_errors import FetchError
from sodbuild.build_scripts.build_utils import (
    DEFAULT_LIBSODIUM_URL,
    remove_path,
)

DOWNLOAD_TIMEOUT_SECOND = 60
CHUNK_SIZE = 64 * 1024


def create_session() -> requests.Session:
    """Create HTTP session with retry strategy."""
    session = requests.Session()
    retry = Retry(
        total=3,
        read=3,
        connect=3,
        backoff_factor=0.3,
        status_forcelist=(500, 502, 503, 504),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def release_url(version, url_template=DEFAULT_LIBSODIUM_URL) -> str:
    return url_template.format(version=version)


def download_file(url, dest_path, session=None):
    session = session or create_session()
    print(f"   Downloading from {url}...")
    try:
        with session.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT_SECOND) as response:
            response.raise_for_status()
            with open(dest_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
    except requests.RequestException as e:
        remove_path(dest_path)
        raise FetchError(f"Download of {url} failed: {e}") from e
    print(f"   ✓ Downloaded to {dest_path}")


def extract_archive(archive_path, dest_dir):
    print(f"   Extracting {os.path.basename(archive_path)}...")
    try:
        with tarfile.open(archive_path, "r:gz") as tar_ref:
            for member in tar_ref.getmembers():
                member_path = os.path.realpath(os.path.join(dest_dir, member.name))
                if not member_path.startswith(os.path.realpath(dest_dir) + os.sep):
                    raise FetchError(f"Refusing to extract {member.name} outside {dest_dir}")
            tar_ref.extractall(dest_dir)
    except (tarfile.TarError, OSError) as e:
        raise FetchError(f"Extraction of {archive_path} failed: {e}") from e


def download_and_extract(
    version, source_dir, url_template=DEFAULT_LIBSODIUM_URL, session=None
) -> str:
    """
    Fetch libsodium-{version}.tar.gz and unpack it as source_dir.

    Any previous source_dir is removed first. The tarball is
    deleted after extraction.

    Returns:
        str: path of the extracted source directory

    Raises:
        FetchError: the download or the extraction failed.
    """
    print(f"Downloading stable release {version} of 'libsodium'")
    source_dir = os.path.abspath(source_dir)
    dest_dir = os.path.dirname(source_dir)
    os.makedirs(dest_dir, exist_ok=True)
    remove_path(source_dir)

    pkg_name = f"libsodium-{version}"
    pkg = os.path.join(dest_dir, f"{pkg_name}.tar.gz")
    download_file(release_url(version, url_template), pkg, session=session)
    try:
        extract_archive(pkg, dest_dir)
        extracted_dir = os.path.join(dest_dir, pkg_name)
        if not os.path.isdir(extracted_dir):
            raise FetchError(f"{pkg} does not contain a {pkg_name} directory")
        shutil.move(extracted_dir, source_dir)
    finally:
        remove_path(pkg)
    return source_dir
