import requests

from conftest import (
    BASE_URL,
    JPEG_BYTES,
    PNG_BYTES,
    WEBP_BYTES,
    FakeResponse,
    FakeSession,
    ranked_game,
    results_page,
)
from jamshots.crawler import download_entry, run_crawler, write_atomic
from jamshots.models import DownloadStatus, GameEntry

PAGE_2_URL = f"{BASE_URL}?page=2"

PAGE_1 = results_page(
    ranked_game("1st", "Evaw!", "data-lazy_src", "https://img.itch.zone/a.png"),
    ranked_game("2nd", "Foo Bar", "src", "//cdn.example.com/b.jpg"),
    next_href="?page=2",
)
PAGE_2 = results_page(ranked_game("3rd", "Baz", "src", "/img/c.webp"))

IMAGES = {
    "https://img.itch.zone/a.png": PNG_BYTES,
    "https://cdn.example.com/b.jpg": JPEG_BYTES,
    "https://itch.io/img/c.webp": WEBP_BYTES,
}


def two_page_site() -> FakeSession:
    return FakeSession({BASE_URL: PAGE_1, PAGE_2_URL: PAGE_2, **IMAGES})


def totals(summary):
    return summary.downloaded, summary.skipped, summary.failed


def test_two_page_crawl_downloads_everything(config, fake_sleep, sleeps):
    session = two_page_site()

    summary = run_crawler(config, session=session, sleep=fake_sleep)

    assert sorted(path.name for path in config.output_dir.iterdir()) == [
        "1-evaw.png",
        "2-foo-bar.jpg",
        "3-baz.webp",
    ]
    assert (config.output_dir / "2-foo-bar.jpg").read_bytes() == JPEG_BYTES
    assert totals(summary) == (3, 0, 0)
    assert summary.total == 3
    assert summary.pages == 2
    assert not summary.stopped_early
    assert not summary.is_hard_failure
    assert [record.filename for record in summary.entries] == [
        "1-evaw.png",
        "2-foo-bar.jpg",
        "3-baz.webp",
    ]
    assert sleeps == [0.5, 0.5, 1.5, 0.5]


def test_second_run_skips_existing_files_without_requesting_them(config, fake_sleep):
    run_crawler(config, session=two_page_site(), sleep=fake_sleep)

    session = two_page_site()
    summary = run_crawler(config, session=session, sleep=fake_sleep)

    assert totals(summary) == (0, 3, 0)
    assert session.requested_urls == [BASE_URL, PAGE_2_URL]
    assert all(record.status == DownloadStatus.SKIPPED for record in summary.entries)


def test_failed_second_page_keeps_first_page_results(config, fake_sleep):
    session = FakeSession(
        {BASE_URL: PAGE_1, PAGE_2_URL: FakeResponse(500, "oops"), **IMAGES}
    )

    summary = run_crawler(config, session=session, sleep=fake_sleep)

    assert totals(summary) == (2, 0, 0)
    assert summary.total == 2
    assert summary.pages == 1
    assert summary.stopped_early
    assert not summary.is_hard_failure


def test_next_link_pointing_at_current_page_terminates(config, fake_sleep, sleeps):
    page = results_page(
        ranked_game("1st", "Loop", "src", "https://img.itch.zone/a.png"),
        next_href=BASE_URL,
    )
    session = FakeSession({BASE_URL: page, **IMAGES})

    summary = run_crawler(config, session=session, sleep=fake_sleep)

    assert session.requested_urls == [BASE_URL, "https://img.itch.zone/a.png"]
    assert summary.pages == 1
    assert 1.5 not in sleeps


def test_empty_page_still_follows_pagination(config, fake_sleep):
    empty = results_page(next_href="?page=2")
    session = FakeSession({BASE_URL: empty, PAGE_2_URL: PAGE_2, **IMAGES})

    summary = run_crawler(config, session=session, sleep=fake_sleep)

    assert summary.pages == 2
    assert summary.first_page_entries == 0
    assert summary.is_hard_failure
    assert totals(summary) == (1, 0, 0)


def test_unreachable_first_page_is_a_hard_failure(config, fake_sleep):
    summary = run_crawler(config, session=FakeSession(), sleep=fake_sleep)

    assert summary.first_page_entries is None
    assert summary.stopped_early
    assert summary.is_hard_failure
    assert summary.total == 0
    assert config.output_dir.is_dir()


def test_image_failures_are_counted_and_crawl_continues(config, fake_sleep):
    session = FakeSession(
        {
            BASE_URL: PAGE_1,
            PAGE_2_URL: PAGE_2,
            "https://img.itch.zone/a.png": FakeResponse(404, ""),
            "https://cdn.example.com/b.jpg": JPEG_BYTES,
            "https://itch.io/img/c.webp": WEBP_BYTES,
        }
    )

    summary = run_crawler(config, session=session, sleep=fake_sleep)

    assert totals(summary) == (2, 0, 1)
    assert summary.total == 3
    assert not (config.output_dir / "1-evaw.png").exists()
    assert summary.entries[0].status == DownloadStatus.FAILED


def test_non_image_payload_is_rejected(config, fake_sleep):
    entry = GameEntry(4, "Html Page", "https://img.itch.zone/d.png")
    config.output_dir.mkdir(parents=True)
    session = FakeSession({entry.image_url: b"<html>not an image</html>"})

    record = download_entry(session, entry, config, fake_sleep)

    assert record.status == DownloadStatus.FAILED
    assert list(config.output_dir.iterdir()) == []


def test_non_image_payload_saved_when_verification_disabled(config, fake_sleep):
    config.verify_images = False
    entry = GameEntry(4, "Html Page", "https://img.itch.zone/d.png")
    config.output_dir.mkdir(parents=True)
    session = FakeSession({entry.image_url: b"<html>not an image</html>"})

    record = download_entry(session, entry, config, fake_sleep)

    assert record.status == DownloadStatus.DOWNLOADED
    assert (config.output_dir / "4-html-page.png").read_bytes() == b"<html>not an image</html>"


def test_existing_file_is_skipped_without_delay(config, fake_sleep, sleeps):
    entry = GameEntry(1, "Evaw!", "https://img.itch.zone/a.png")
    config.output_dir.mkdir(parents=True)
    (config.output_dir / "1-evaw.png").write_bytes(b"old")
    session = FakeSession(IMAGES)

    record = download_entry(session, entry, config, fake_sleep)

    assert record.status == DownloadStatus.SKIPPED
    assert session.calls == []
    assert sleeps == []
    assert (config.output_dir / "1-evaw.png").read_bytes() == b"old"


def test_write_atomic_leaves_no_partial_files(tmp_path):
    target = tmp_path / "1-a.png"
    write_atomic(target, PNG_BYTES)
    write_atomic(target, JPEG_BYTES)
    assert [path.name for path in tmp_path.iterdir()] == ["1-a.png"]
    assert target.read_bytes() == JPEG_BYTES


def html_response(body: str, content_type: str = "text/html") -> requests.Response:
    resp = requests.Response()
    resp.status_code = 200
    resp.headers["Content-Type"] = content_type
    resp._content = body.encode("utf-8")
    resp.encoding = requests.utils.get_encoding_from_headers(resp.headers)
    return resp


def test_page_encoding_comes_from_meta_charset(config, fake_sleep):
    page = (
        '<html><head><meta charset="utf-8"><title>Results</title></head><body>'
        + ranked_game("1st", "Foo–Bar", "src", "https://img.itch.zone/a.png")
        + "</body></html>"
    )
    session = FakeSession({BASE_URL: html_response(page), **IMAGES})

    summary = run_crawler(config, session=session, sleep=fake_sleep)

    assert [record.entry.title for record in summary.entries] == ["Foo–Bar"]
    assert (config.output_dir / "1-foo-bar.png").exists()


def test_pagination_cycle_is_not_followed(config, fake_sleep):
    page_b_url = f"{BASE_URL}?page=b"
    page_a = results_page(
        ranked_game("1st", "Evaw!", "src", "https://img.itch.zone/a.png"),
        next_href="?page=b",
    )
    page_b = results_page(next_href=BASE_URL)
    session = FakeSession({BASE_URL: page_a, page_b_url: page_b, **IMAGES})

    summary = run_crawler(config, session=session, sleep=fake_sleep)

    assert session.requested_urls == [BASE_URL, "https://img.itch.zone/a.png", page_b_url]
    assert summary.pages == 2
    assert not summary.stopped_early
