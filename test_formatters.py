from datetime import datetime

from mpvault.core.formatters import format_timestamp, proxy_image


def test_format_timestamp():
    ts = 1684152000
    assert format_timestamp(ts) == datetime.fromtimestamp(ts).strftime('%Y-%m-%d %H:%M')
    assert len(format_timestamp(0)) == len('1970-01-01 00:00')


def test_proxy_image_encodes_like_uri_component():
    assert proxy_image("https://mmbiz.example.com/a.png?wx_fmt=png&from=appmsg") == (
        "https://service.champ.design/api/proxy?url="
        "https%3A%2F%2Fmmbiz.example.com%2Fa.png%3Fwx_fmt%3Dpng%26from%3Dappmsg"
    )
    assert proxy_image("a b(c)!'*~-_.") == "https://service.champ.design/api/proxy?url=a%20b(c)!'*~-_."
