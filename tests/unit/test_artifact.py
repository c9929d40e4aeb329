import asyncio
import time
from pathlib import Path
import pytest
import httpx
from beam_imagebot.retrieval.artifact import ArtifactFetcher

def _fetcher(settings, status=200, content=b"\x89PNGdata"):
    def handle(request):
        return httpx.Response(status, content=content)
    return ArtifactFetcher(settings, http=httpx.AsyncClient(transport=httpx.MockTransport(handle)))

@pytest.mark.asyncio
async def test_fetch_to_temp_file_writes_unique_files(settings, tmp_path):
    """
    WHY: Concurrent requests must never write to the same file.
    HOW: Fetch the same URL twice.
    EXPECTED: Two distinct image_*.png files in ARTIFACT_DIR, both holding the downloaded bytes.
    """
    fetcher = _fetcher(settings)

    first = await fetcher.fetch_to_temp_file("https://x/img.png")
    second = await fetcher.fetch_to_temp_file("https://x/img.png")

    assert first != second
    for path in (first, second):
        assert path.parent == tmp_path
        assert path.name.startswith("image_") and path.suffix == ".png"
        assert path.read_bytes() == b"\x89PNGdata"

@pytest.mark.asyncio
async def test_fetch_http_error_writes_nothing(settings, tmp_path):
    """
    WHY: An error page must not be saved and posted as an image.
    HOW: Image host answers 500.
    EXPECTED: httpx.HTTPStatusError; ARTIFACT_DIR stays empty.
    """
    fetcher = _fetcher(settings, status=500)

    with pytest.raises(httpx.HTTPStatusError):
        await fetcher.fetch_to_temp_file("https://x/img.png")
    assert list(tmp_path.iterdir()) == []

@pytest.mark.asyncio
async def test_temp_artifact_deletes_on_success_and_failure(settings, tmp_path):
    """
    WHY: The temp file is released on every exit path.
    HOW: Use temp_artifact once normally and once raising inside the block.
    EXPECTED: File exists inside the block, is gone after both.
    """
    fetcher = _fetcher(settings)

    async with fetcher.temp_artifact("https://x/img.png") as path:
        assert path.exists()
    assert not path.exists()

    with pytest.raises(RuntimeError):
        async with fetcher.temp_artifact("https://x/img.png") as path:
            assert path.exists()
            raise RuntimeError("upload failed")
    assert not path.exists()
    assert list(tmp_path.iterdir()) == []

@pytest.mark.asyncio
async def test_cancelled_write_leaves_no_file(settings, tmp_path, monkeypatch):
    """
    WHY: Shutdown cancels in-flight requests, possibly while the image is being written.
    HOW: Make Path.write_bytes slow (0.3s in its worker thread) and cancel the temp_artifact user at 0.1s.
    EXPECTED: The task ends cancelled and ARTIFACT_DIR is empty.
    """
    original_write = Path.write_bytes

    def slow_write(self, data):
        time.sleep(0.3)
        return original_write(self, data)

    monkeypatch.setattr(Path, "write_bytes", slow_write)
    fetcher = _fetcher(settings)

    async def use_artifact():
        async with fetcher.temp_artifact("https://x/img.png"):
            pass

    task = asyncio.create_task(use_artifact())
    await asyncio.sleep(0.1)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert list(tmp_path.iterdir()) == []

@pytest.mark.asyncio
async def test_failed_write_leaves_no_file(settings, tmp_path, monkeypatch):
    """
    WHY: A disk error halfway through a write must not leave a partial image behind.
    HOW: Path.write_bytes writes a few bytes, then raises OSError.
    EXPECTED: fetch_to_temp_file raises OSError and ARTIFACT_DIR is empty.
    """
    original_write = Path.write_bytes

    def partial_write(self, data):
        original_write(self, data[:4])
        raise OSError("No space left on device")

    monkeypatch.setattr(Path, "write_bytes", partial_write)
    fetcher = _fetcher(settings)

    with pytest.raises(OSError, match="No space left"):
        await fetcher.fetch_to_temp_file("https://x/img.png")
    assert list(tmp_path.iterdir()) == []
