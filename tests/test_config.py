from app.core.config import Settings, parse_cors_origins, parse_name_list


def test_parse_cors_origins_csv():
    value = "http://localhost:5173, http://localhost:3000"
    assert parse_cors_origins(value) == [
        "http://localhost:5173",
        "http://localhost:3000",
    ]


def test_parse_cors_origins_json_list():
    value = '["http://localhost:5173", "https://lantern.example.com"]'
    assert parse_cors_origins(value) == [
        "http://localhost:5173",
        "https://lantern.example.com",
    ]


def test_parse_cors_origins_deduplicates():
    value = "http://localhost:5173,http://localhost:5173"
    assert parse_cors_origins(value) == ["http://localhost:5173"]


def test_parse_name_list_lowercases_and_skips_blanks():
    assert parse_name_list(" Admin, ,moderator ") == ["admin", "moderator"]


def test_settings_read_wallet_and_lantern_values_from_env(monkeypatch):
    monkeypatch.setenv("DEFAULT_WALLET_AMOUNT", "25")
    monkeypatch.setenv("LANTERN_SIGNAL_THRESHOLD", "40")
    settings = Settings()
    assert settings.default_wallet_amount == 25
    assert settings.lantern_signal_threshold == 40
