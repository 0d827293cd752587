"""
Image handler module.

Writes embedded base64 images and downloads linked images next to the post
files. Work runs on a thread pool so post processing never waits on image
I/O; call wait() (or leave the context manager) to join everything.
"""

import base64
import binascii
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from rich.console import Console

console = Console()

DEFAULT_USER_AGENT = 'Mozilla/5.0 (blog2md/1.0)'
DEFAULT_TIMEOUT = 30
DEFAULT_MAX_WORKERS = 4


class ImageHandler:
    """Handles writing and downloading images for posts."""

    def __init__(self, user_agent: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT,
                 max_workers: int = DEFAULT_MAX_WORKERS):
        """Initialize image handler with HTTP session and worker pool."""
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent or DEFAULT_USER_AGENT
        })
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='blog2md-image')
        self._pending: List[Future] = []
        self._written: List[Path] = []
        self._failed: List[str] = []

    def __enter__(self) -> 'ImageHandler':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def save_base64(self, payload: str, dest: Path) -> Future:
        """Schedule writing a base64 payload to dest."""
        future = self._executor.submit(self._write_base64, payload, Path(dest))
        self._pending.append(future)
        return future

    def download(self, url: str, dest: Path) -> Future:
        """Schedule downloading url to dest."""
        future = self._executor.submit(self._download_image, url, Path(dest))
        self._pending.append(future)
        return future

    def _write_base64(self, payload: str, dest: Path) -> Optional[Path]:
        try:
            data = base64.b64decode(payload)
        except (binascii.Error, ValueError) as e:
            self._fail(str(dest), f"Invalid base64 image data for {dest.name}: {e}")
            return None

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            with open(dest, 'wb') as f:
                f.write(data)
        except OSError as e:
            self._fail(str(dest), f"Error writing image {dest}: {e}")
            return None

        self._written.append(dest)
        return dest

    def _download_image(self, url: str, dest: Path) -> Optional[Path]:
        """Download a single image and return local path."""
        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)
            response.raise_for_status()

            content_type = response.headers.get('content-type', '')
            if content_type and not content_type.startswith('image/'):
                console.print(f"[yellow]Warning: {url} doesn't appear to be an image (content-type: {content_type})[/yellow]")

            dest.parent.mkdir(parents=True, exist_ok=True)
            with open(dest, 'wb') as f:
                for chunk in response.iter_content(chunk_size=8192):
                    f.write(chunk)

        except requests.exceptions.RequestException as e:
            self._fail(url, f"Network error downloading {url}: {e}")
            return None
        except OSError as e:
            self._fail(url, f"Error writing {dest}: {e}")
            return None

        self._written.append(dest)
        return dest

    def _fail(self, target: str, message: str) -> None:
        self._failed.append(target)
        console.print(f"[red]{message}[/red]")

    def wait(self) -> Dict[str, Any]:
        """Block until every scheduled image task has finished."""
        pending, self._pending = self._pending, []
        for future in pending:
            try:
                future.result()
            except Exception as e:
                # Anything the task did not handle itself
                self._fail('unknown', f"Image task failed: {e}")

        return self.get_image_stats()

    def close(self) -> None:
        """Join outstanding work and release the pool and session."""
        self.wait()
        self._executor.shutdown(wait=True)
        self.session.close()

    def get_image_stats(self) -> Dict[str, Any]:
        """Get statistics about written images."""
        total_size = 0
        for path in self._written:
            try:
                total_size += path.stat().st_size
            except OSError:
                continue

        return {
            'total_images': len(self._written),
            'failed_images': len(self._failed),
            'total_size_mb': round(total_size / (1024 * 1024), 2)
        }
