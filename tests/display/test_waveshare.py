from __future__ import annotations

import pytest
from PIL import Image

from year_progress.display import fit_to_resolution
from year_progress.display.waveshare import PreviewDisplayDriver, WaveshareEPDDriver


class _FakeEPD:
    def __init__(self) -> None:
        self.width = 800
        self.height = 480
        self.init_calls = 0
        self.clear_calls = 0
        self.display_calls: list[bytes] = []
        self.getbuffer_calls = []
        self.sleep_calls = 0

    def init(self) -> None:
        self.init_calls += 1

    def Clear(self) -> None:
        self.clear_calls += 1

    def display(self, buffer: bytes) -> None:
        self.display_calls.append(bytes(buffer))

    def getbuffer(self, image: Image.Image) -> bytes:
        self.getbuffer_calls.append(image.copy())
        return image.tobytes()

    def sleep(self) -> None:
        self.sleep_calls += 1


class TestWaveshareEPDDriver:
    def test_initialize_and_display_flow(self) -> None:
        fake = _FakeEPD()
        driver = WaveshareEPDDriver(epd=fake)

        driver.initialize()
        driver.initialize()
        assert fake.init_calls == 1

        driver.clear()
        assert fake.clear_calls == 1

        image = Image.new("1", (800, 480), 0)
        driver.display_image(image)

        assert len(fake.getbuffer_calls) == 1
        assert fake.display_calls == [image.tobytes()]

        driver.sleep()
        assert fake.sleep_calls == 1

    def test_requires_initialization(self) -> None:
        driver = WaveshareEPDDriver(epd=_FakeEPD())

        with pytest.raises(RuntimeError):
            driver.clear()

        driver.initialize()
        driver.clear()

    def test_skips_refresh_when_frame_identical(self) -> None:
        fake = _FakeEPD()
        driver = WaveshareEPDDriver(epd=fake)
        driver.initialize()

        base = Image.new("L", (800, 480), 255)
        driver.display_image(base)
        driver.display_image(base.copy())

        assert len(fake.display_calls) == 1

    def test_changed_frame_gets_full_refresh(self) -> None:
        fake = _FakeEPD()
        driver = WaveshareEPDDriver(epd=fake)
        driver.initialize()

        base = Image.new("L", (800, 480), 255)
        driver.display_image(base)
        updated = base.copy()
        updated.paste(0, (100, 100, 140, 140))
        driver.display_image(updated)

        assert len(fake.display_calls) == 2
        assert fake.display_calls[0] != fake.display_calls[1]

    def test_clear_forces_next_refresh(self) -> None:
        fake = _FakeEPD()
        driver = WaveshareEPDDriver(epd=fake)
        driver.initialize()

        base = Image.new("L", (800, 480), 255)
        driver.display_image(base)
        driver.clear()
        driver.display_image(base)

        assert len(fake.display_calls) == 2

    def test_rejects_wrong_resolution(self) -> None:
        driver = WaveshareEPDDriver(epd=_FakeEPD())
        driver.initialize()

        with pytest.raises(ValueError):
            driver.display_image(Image.new("L", (728, 764), 255))


class TestPreviewDisplayDriver:
    @staticmethod
    def test_records_frames_and_saves(tmp_path) -> None:
        driver = PreviewDisplayDriver(output_dir=tmp_path)
        driver.initialize()
        driver.clear()

        frame = Image.new("L", driver.resolution, 51)
        driver.display_image(frame)

        history = driver.history
        assert len(history) == 2  # clear() adds a blank frame, then display_image
        assert history[-1].tobytes() == frame.tobytes()
        assert len(list(tmp_path.glob("frame-*.png"))) == 1

    @staticmethod
    def test_requires_initialization() -> None:
        driver = PreviewDisplayDriver()

        with pytest.raises(RuntimeError):
            driver.display_image(Image.new("L", driver.resolution, 0))

        driver.initialize()
        driver.display_image(Image.new("L", driver.resolution, 0))

    @staticmethod
    def test_validates_resolution() -> None:
        driver = PreviewDisplayDriver()
        driver.initialize()

        with pytest.raises(ValueError):
            driver.display_image(Image.new("L", (100, 100), 0))


def test_fit_to_resolution_letterboxes_widget() -> None:
    widget = Image.new("L", (728, 764), 0)

    fitted = fit_to_resolution(widget, (800, 480))

    assert fitted.size == (800, 480)
    assert fitted.mode == "L"
    assert fitted.getpixel((0, 0)) == 255
    assert fitted.getpixel((400, 240)) == 0


def test_fit_to_resolution_keeps_matching_images() -> None:
    image = Image.new("RGB", (800, 480), (0, 0, 0))

    fitted = fit_to_resolution(image, (800, 480))

    assert fitted.size == (800, 480)
    assert fitted.mode == "L"
