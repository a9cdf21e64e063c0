import base64
from unittest.mock import MagicMock, patch

import pytest

from rpc.solana_client import RpcError, SolanaRpcClient, account_bytes, parsed_info


def rpc_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    return response


@pytest.fixture
def client():
    return SolanaRpcClient(rpc_url="http://rpc.test", commitment="confirmed")


@patch("utils.retry.requests.post")
def test_request_payload(mock_post, client):
    mock_post.return_value = rpc_response({"jsonrpc": "2.0", "id": 1, "result": {"value": None}})

    assert client.get_account_info("Acc1") is None

    args, kwargs = mock_post.call_args
    assert args[0] == "http://rpc.test"
    body = kwargs["json"]
    assert body["method"] == "getAccountInfo"
    assert body["params"] == ["Acc1", {"encoding": "jsonParsed", "commitment": "confirmed"}]
    assert "timeout" in kwargs


@patch("utils.retry.requests.post")
def test_error_payload_raises(mock_post, client):
    mock_post.return_value = rpc_response({
        "jsonrpc": "2.0", "id": 1,
        "error": {"code": -32602, "message": "Invalid param"},
    })

    with pytest.raises(RpcError) as exc_info:
        client.get_account_info("bad")

    assert exc_info.value.method == "getAccountInfo"
    assert exc_info.value.code == -32602


@patch("utils.retry.requests.post")
def test_multiple_accounts_are_batched(mock_post, client):
    pubkeys = [f"Acc{i}" for i in range(150)]

    def reply(url, json=None, **kwargs):
        batch = json["params"][0]
        return rpc_response({"result": {"value": [{"key": key} for key in batch]}})

    mock_post.side_effect = reply

    accounts = client.get_multiple_accounts(pubkeys)

    assert mock_post.call_count == 2
    assert len(accounts) == 150
    assert accounts["Acc149"] == {"key": "Acc149"}


@patch("utils.retry.requests.post")
def test_program_account_filters(mock_post, client):
    mock_post.return_value = rpc_response({"result": []})

    client.get_program_accounts("Prog", data_size=165, memcmp={"offset": 0, "bytes": "Mint"})

    config = mock_post.call_args[1]["json"]["params"][1]
    assert config["filters"] == [{"dataSize": 165}, {"memcmp": {"offset": 0, "bytes": "Mint"}}]
    assert config["encoding"] == "base64"


@patch("utils.retry.requests.post")
def test_token_accounts_by_owner(mock_post, client):
    mock_post.return_value = rpc_response({"result": {"value": [{"pubkey": "T1"}]}})

    assert client.get_token_accounts_by_owner("Wallet", "Mint") == [{"pubkey": "T1"}]
    params = mock_post.call_args[1]["json"]["params"]
    assert params[:2] == ["Wallet", {"mint": "Mint"}]


def test_account_bytes():
    account = {"data": [base64.b64encode(b"\x01\x02").decode(), "base64"]}
    assert account_bytes(account) == b"\x01\x02"

    with pytest.raises(ValueError):
        account_bytes({"data": ["abc", "base58"]})


def test_parsed_info():
    account = {"data": {"program": "spl-token-2022", "parsed": {"info": {"decimals": 6}, "type": "mint"}}}

    assert parsed_info(account) == {"decimals": 6}
    assert parsed_info(None) is None
    assert parsed_info({"data": ["abc", "base64"]}) is None
