"""
Tests for the publish-list client, without network.
"""

import json

import pytest

from mpvault.core.article_list import ArticleListClient, get_article_list
from mpvault.core.config import ClientConfig
from mpvault.core.exceptions import ArticleListError, SessionExpiredError


def publish_response(*pages_of_articles, ret=0):
    """Build an API payload; each argument is one publish entry's appmsgex list (None = no publish_info)."""
    publish_list = []
    for articles in pages_of_articles:
        if articles is None:
            publish_list.append({"publish_type": 1, "publish_info": ""})
        else:
            publish_list.append({"publish_info": json.dumps({"appmsgex": articles})})
    return {
        "base_resp": {"ret": ret, "err_msg": "ok"},
        "publish_page": json.dumps({"total_count": 3, "publish_list": publish_list}),
    }


@pytest.fixture
def client():
    return ArticleListClient(ClientConfig(base_url="http://backend.test"))


def test_flattens_nested_publish_info(mocker, client, make_response):
    payload = publish_response(
        [{"title": "A", "link": "https://mp.example.com/s/a"}, {"title": "B", "link": "https://mp.example.com/s/b"}],
        None,
        [{"title": "C", "link": "https://mp.example.com/s/c"}],
    )
    get = mocker.patch.object(client.session, 'get', return_value=make_response(json_data=payload))

    articles = client.get_article_list("FAKEID", "TOKEN", page=2, keyword="news")

    assert [a["title"] for a in articles] == ["A", "B", "C"]
    args, kwargs = get.call_args
    assert args[0] == "http://backend.test/api/appmsgpublish"
    assert kwargs["params"] == {"id": "FAKEID", "token": "TOKEN", "page": 2, "size": 20, "keyword": "news"}


def test_empty_publish_list_means_end(mocker, client, make_response):
    mocker.patch.object(client.session, 'get', return_value=make_response(json_data=publish_response(None, None)))
    assert client.get_article_list("FAKEID", "TOKEN", page=9) == []


def test_session_expired(mocker, client, make_response):
    payload = {"base_resp": {"ret": 200003, "err_msg": "invalid session"}}
    mocker.patch.object(client.session, 'get', return_value=make_response(json_data=payload))

    with pytest.raises(SessionExpiredError) as exc_info:
        client.get_article_list("FAKEID", "TOKEN")

    assert str(exc_info.value) == "session expired"
    assert exc_info.value.ret == 200003


def test_other_error_carries_server_message(mocker, client, make_response):
    payload = {"base_resp": {"ret": 200013, "err_msg": "freq control"}}
    mocker.patch.object(client.session, 'get', return_value=make_response(json_data=payload))

    with pytest.raises(ArticleListError) as exc_info:
        client.get_article_list("FAKEID", "TOKEN")

    assert not isinstance(exc_info.value, SessionExpiredError)
    assert str(exc_info.value) == "freq control"
    assert exc_info.value.ret == 200013


def test_iter_articles_stops_on_empty_page(mocker, client, make_response):
    responses = [
        make_response(json_data=publish_response([{"title": "1"}, {"title": "2"}])),
        make_response(json_data=publish_response([{"title": "3"}])),
        make_response(json_data=publish_response()),
    ]
    get = mocker.patch.object(client.session, 'get', side_effect=responses)

    titles = [a["title"] for a in client.iter_articles("FAKEID", "TOKEN")]

    assert titles == ["1", "2", "3"]
    assert [c.kwargs["params"]["page"] for c in get.call_args_list] == [1, 2, 3]


def test_iter_articles_respects_max_pages(mocker, client, make_response):
    page = make_response(json_data=publish_response([{"title": "x"}]))
    get = mocker.patch.object(client.session, 'get', return_value=page)

    assert len(list(client.iter_articles("FAKEID", "TOKEN", max_pages=2))) == 2
    assert get.call_count == 2


def test_module_level_helper(mocker, make_response):
    mocker.patch('requests.Session.get', return_value=make_response(json_data=publish_response([{"title": "only"}])))
    assert get_article_list("FAKEID", "TOKEN") == [{"title": "only"}]
