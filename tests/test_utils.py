import pytest

from web_thumbnailer.errors import NotFoundError
from web_thumbnailer.models import ServerContext
from web_thumbnailer.utils import (
    generate_relative_url_from_path,
    get_domain,
    get_url_file_extension,
    slugify,
)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://Sub.Example.COM:8080/x?y=1", "sub.example.com"),
        ("Example.com/path/page.html", "example.com"),
        ("http://localhost/a", "localhost"),
    ],
)
def test_get_domain(url, expected):
    assert get_domain(url) == expected


def test_get_domain_rejects_malformed_host():
    with pytest.raises(NotFoundError):
        get_domain("http://[oops/page")


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("http://x/a/b.JPG?size=1#frag", "jpg"),
        ("http://x/a/b.webp", "webp"),
        ("http://x/a/", ""),
        ("http://x/a.b/c", ""),
        ("http://x", ""),
    ],
)
def test_get_url_file_extension(url, expected):
    assert get_url_file_extension(url) == expected


def test_relative_url_strips_document_root():
    server = ServerContext(document_root="/var/www/html")
    assert generate_relative_url_from_path(server, "/var/www/html/site/assets/t.jpg") == "site/assets/t.jpg"


def test_relative_url_document_root_with_trailing_slash():
    server = ServerContext(document_root="/var/www/html/")
    assert generate_relative_url_from_path(server, "/var/www/html/t.jpg") == "t.jpg"


def test_context_document_root_wins():
    server = ServerContext(document_root="/var/www", context_document_root="/var/www/html")
    assert generate_relative_url_from_path(server, "/var/www/html/a/t.jpg") == "a/t.jpg"


def test_script_directory_is_stripped_after_document_root():
    server = ServerContext(document_root="/var/www/html", script_name="/site/index.php")
    path = "/var/www/html/site/cache/thumb/t.jpg"
    assert generate_relative_url_from_path(server, path) == "cache/thumb/t.jpg"


def test_script_at_root_strips_nothing():
    server = ServerContext(document_root="/var/www/html", script_name="/app.py")
    assert generate_relative_url_from_path(server, "/var/www/html/cache/t.jpg") == "cache/t.jpg"


def test_path_outside_document_root_is_unchanged():
    server = ServerContext(document_root="/srv/public")
    assert generate_relative_url_from_path(server, "/tmp/cache/t.jpg") == "/tmp/cache/t.jpg"


def test_server_context_from_environ():
    server = ServerContext.from_environ({"DOCUMENT_ROOT": "/srv", "SCRIPT_NAME": "/x/run.cgi"})
    assert server == ServerContext(document_root="/srv", script_name="/x/run.cgi")


def test_slugify():
    assert slugify("Example.COM-www.example.com") == "example-com-www-example-com"
    assert slugify("***", fallback="default") == "default"
