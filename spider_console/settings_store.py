import configparser
from pathlib import Path

from spider_engine.cards import DIFFICULTIES

SETTINGS_PATH = Path(__file__).with_name("settings.ini")

DEFAULT_SETTINGS = {
    "suit_count": "1",
    "seed": "",
}


def _sanitize(settings):
    data = dict(DEFAULT_SETTINGS)
    data.update({k: v for k, v in settings.items() if k in DEFAULT_SETTINGS})

    try:
        suit_count = int(str(data["suit_count"]).strip())
    except ValueError:
        suit_count = int(DEFAULT_SETTINGS["suit_count"])
    if suit_count not in DIFFICULTIES:
        suit_count = int(DEFAULT_SETTINGS["suit_count"])
    data["suit_count"] = str(suit_count)

    raw_seed = "" if data["seed"] is None else str(data["seed"]).strip()
    try:
        data["seed"] = str(int(raw_seed)) if raw_seed else ""
    except ValueError:
        data["seed"] = ""
    return data


def load_settings():
    parser = configparser.ConfigParser()
    if not SETTINGS_PATH.exists():
        return dict(DEFAULT_SETTINGS)
    try:
        parser.read(SETTINGS_PATH, encoding="utf-8")
    except configparser.Error:
        return dict(DEFAULT_SETTINGS)
    if "console" not in parser:
        return dict(DEFAULT_SETTINGS)
    raw = {key: parser["console"].get(key, default) for key, default in DEFAULT_SETTINGS.items()}
    return _sanitize(raw)


def save_settings(settings):
    data = _sanitize(settings)
    parser = configparser.ConfigParser()
    parser["console"] = data
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    with SETTINGS_PATH.open("w", encoding="utf-8") as f:
        parser.write(f)


def settings_suit_count(settings) -> int:
    return int(_sanitize(settings)["suit_count"])


def settings_seed(settings):
    seed = _sanitize(settings)["seed"]
    return int(seed) if seed else None
