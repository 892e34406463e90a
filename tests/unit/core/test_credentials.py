from edge_shared.constants import Provider

from edge_dashboard.core.credentials import (
    LAYOUTS,
    load_credentials,
    parse_scope,
    resolve_accounts,
)


class TestResolveAccounts:
    def test_unindexed_then_indexed_in_order(self):
        env = {
            "CF_API_KEY": "k0",
            "CF_EMAIL": "e0@example.com",
            "CF_API_KEY_1": "k1",
            "CF_EMAIL_1": "e1@example.com",
            "CF_ACCOUNT_NAME_1": "Personal",
            "CF_API_KEY_2": "k2",
            "CF_EMAIL_2": "e2@example.com",
        }
        accounts = resolve_accounts(env, LAYOUTS[Provider.CLOUDFLARE])

        assert [a.name for a in accounts] == ["Cloudflare", "Personal", "Cloudflare 2"]
        assert [a.key_id for a in accounts] == ["k0", "k1", "k2"]

    def test_probing_stops_at_first_gap(self):
        env = {
            "SECRET_ID_1": "id1",
            "SECRET_KEY_1": "key1",
            "SECRET_ID_3": "id3",
            "SECRET_KEY_3": "key3",
        }
        accounts = resolve_accounts(env, LAYOUTS[Provider.EDGEONE])

        assert [a.key_id for a in accounts] == ["id1"]
        assert accounts[0].name == "EdgeOne 1"

    def test_incomplete_pair_is_ignored(self):
        env = {"ESA_ACCESS_KEY_ID": "only-id"}
        assert resolve_accounts(env, LAYOUTS[Provider.ESA]) == []

    def test_scope_and_account_id(self):
        env = {
            "CF_API_KEY": "k",
            "CF_EMAIL": "e@example.com",
            "CF_DOMAINS": " A.com, ,b.COM ",
            "CF_ACCOUNT_ID": "acc-1",
        }
        (account,) = resolve_accounts(env, LAYOUTS[Provider.CLOUDFLARE])

        assert account.scope == ("a.com", "b.com")
        assert account.account_id == "acc-1"


class TestAccountConfig:
    def test_secret_not_in_repr(self):
        (account,) = resolve_accounts(
            {"SECRET_ID": "AKIDvisible", "SECRET_KEY": "hidden-secret-value"},
            LAYOUTS[Provider.EDGEONE],
        )
        assert "hidden-secret-value" not in repr(account)
        assert "AKIDvisible" not in repr(account)

    def test_matches_is_case_insensitive(self, make_account):
        account = make_account(scope="Example.COM")
        assert account.matches("example.com")
        assert account.matches(None, "EXAMPLE.com ")
        assert not account.matches("other.com")

    def test_empty_scope_matches_everything(self, make_account):
        assert make_account().matches("anything.net")


def test_parse_scope_handles_empty_values():
    assert parse_scope(None) == ()
    assert parse_scope(" , ") == ()


def test_load_credentials_counts_per_provider():
    registry = load_credentials(
        {
            "CF_API_KEY": "k",
            "CF_EMAIL": "e@example.com",
            "ESA_ACCESS_KEY_ID_1": "a",
            "ESA_ACCESS_KEY_SECRET_1": "b",
            "ESA_ACCESS_KEY_ID_2": "c",
            "ESA_ACCESS_KEY_SECRET_2": "d",
        }
    )
    assert registry.counts() == {"cloudflare": 1, "edgeone": 0, "esa": 2}
    assert [a.name for a in registry.esa] == ["Aliyun ESA 1", "Aliyun ESA 2"]
    assert registry.accounts(Provider.ESA) == registry.esa
    assert registry.accounts(Provider.EDGEONE) == ()
