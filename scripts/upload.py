#!/usr/bin/env python3
"""
Image Gallery - Batch Upload Script

Uploads images from a local folder through the gallery API: each file is
checked with Pillow, a presigned URL is requested from
POST /images/presigned-url, and the bytes are PUT straight to S3.

Usage:
    python upload.py /path/to/folder [--name "Display name"] [--api-url URL] [--token TOKEN]

Requirements:
    pip install httpx pillow python-dotenv
"""

import os
import sys
import argparse
from pathlib import Path
from typing import Optional

import httpx
from PIL import Image, UnidentifiedImageError
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Configuration
API_URL = os.getenv('GALLERY_API_URL', 'http://localhost:3000')
API_TOKEN = os.getenv('GALLERY_API_TOKEN')

# Supported image formats
SUPPORTED_FORMATS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}

# Must match the value signed into the presigned URL
UPLOAD_CONTENT_TYPE = 'image/*'
IMAGE_NAME_MAX_LENGTH = 40


class UploadError(Exception):
    pass


def display_name_for(path: Path, name: Optional[str] = None) -> str:
    """Display name for an upload, truncated to the API's limit."""
    candidate = (name or path.stem.replace('_', ' ').replace('-', ' ')).strip()
    return candidate[:IMAGE_NAME_MAX_LENGTH].strip()


def is_valid_image(path: Path) -> bool:
    """Check that Pillow can parse the file."""
    try:
        with Image.open(path) as img:
            img.verify()
        return True
    except (UnidentifiedImageError, OSError) as e:
        print(f"  Warning: {path.name} is not a readable image: {e}")
        return False


class GalleryUploader:
    def __init__(self, api_url: str = API_URL, token: Optional[str] = API_TOKEN,
                 client: Optional[httpx.Client] = None):
        if not token:
            raise UploadError('An API token is required (set GALLERY_API_TOKEN or pass --token)')
        self.api_url = api_url.rstrip('/')
        self.token = token
        self.client = client or httpx.Client(timeout=30.0)

    def request_upload_url(self, image_name: str) -> dict:
        """Ask the API for a presigned PUT URL."""
        response = self.client.post(
            f"{self.api_url}/images/presigned-url",
            json={'imageName': image_name},
            headers={'Authorization': f'Bearer {self.token}'},
        )
        if response.status_code != 200:
            try:
                error = response.json().get('error', response.text)
            except ValueError:
                error = response.text
            raise UploadError(f"API returned {response.status_code}: {error}")
        return response.json()

    def put_file(self, presigned_url: str, path: Path):
        with open(path, 'rb') as f:
            response = self.client.put(
                presigned_url,
                content=f.read(),
                headers={'Content-Type': UPLOAD_CONTENT_TYPE},
            )
        if response.status_code not in (200, 204):
            raise UploadError(f"S3 upload failed with {response.status_code}")

    def upload_file(self, path: Path, name: Optional[str] = None) -> dict:
        """Upload a single image and return the API's response body."""
        if not is_valid_image(path):
            raise UploadError(f"{path.name} is not a supported image")

        image_name = display_name_for(path, name)
        issued = self.request_upload_url(image_name)
        self.put_file(issued['presignedUrl'], path)
        return issued

    def upload_folder(self, folder_path: Path, name: Optional[str] = None) -> dict:
        """Upload every supported image in a folder."""
        if not folder_path.is_dir():
            print(f"Error: Path is not a directory: {folder_path}")
            return {'success': False, 'error': 'Not a directory'}

        image_files = sorted(
            (f for f in folder_path.iterdir() if f.is_file() and f.suffix.lower() in SUPPORTED_FORMATS),
            key=lambda x: x.name.lower()
        )
        if not image_files:
            print(f"No supported images found in: {folder_path}")
            return {'success': False, 'error': 'No images found'}

        print(f"\nUploading {len(image_files)} images")
        print("-" * 50)

        uploaded = []
        for idx, image_file in enumerate(image_files, 1):
            print(f"[{idx}/{len(image_files)}] {image_file.name}...", end=' ')
            try:
                issued = self.upload_file(image_file, name)
            except (UploadError, httpx.HTTPError) as e:
                print(f"FAILED ({e})")
                continue
            uploaded.append({'imageId': issued['imageId'], 'uuidFilename': issued['uuidFilename']})
            print("OK")

        print("-" * 50)
        print(f"Uploaded {len(uploaded)}/{len(image_files)} images")

        return {'success': True, 'uploaded': uploaded}


def main():
    parser = argparse.ArgumentParser(
        description='Upload images to the gallery through presigned URLs'
    )
    parser.add_argument('path', type=str, help='Image file or folder of images')
    parser.add_argument('--name', '-n', type=str, help='Display name (defaults to the file name)')
    parser.add_argument('--api-url', type=str, default=API_URL, help='Gallery API base URL')
    parser.add_argument('--token', type=str, default=API_TOKEN, help='Cognito ID token')

    args = parser.parse_args()
    target = Path(args.path).expanduser().resolve()

    try:
        uploader = GalleryUploader(args.api_url, args.token)
        if target.is_file():
            issued = uploader.upload_file(target, args.name)
            print(f"Uploaded {target.name} as image {issued['imageId']} ({issued['uuidFilename']})")
            return 0
        result = uploader.upload_folder(target, args.name)
    except (UploadError, httpx.HTTPError) as e:
        print(f"Error: {e}")
        return 1

    return 0 if result['success'] else 1


if __name__ == '__main__':
    sys.exit(main())
