from types import SimpleNamespace

from shared.models import SyncOptions, Variant
from cdn_sync.policy import images_pending, should_upload
from cdn_sync.remote_index import RemoteKeyIndex

from conftest import InMemoryStorage


def make_context(config, remote=(), force_write=False, pending=False):
    return SimpleNamespace(
        config=config,
        options=SyncOptions(force_write=force_write),
        index=set(remote),
        images_pending=pending,
    )


def test_cdn_disabled_wins_over_everything(add_asset, make_config):
    config = make_config(gzip=True, rewrite_css_path=True, disable_cdn_for=["assets/admin/*"])
    path = add_asset("assets/admin/admin.css")
    ctx = make_context(config, force_write=True, pending=True)
    assert should_upload("static/assets/gz/admin/admin.css", path, Variant.GZIP, ctx) is False
    assert should_upload("static/assets/plain/admin/admin.css", path, Variant.PLAIN, ctx) is False


def test_gzip_variant_always_uploaded(add_asset, make_config):
    config = make_config(gzip=True)
    path = add_asset("assets/app.js")
    key = "static/assets/gz/app.js"
    assert should_upload(key, path, Variant.GZIP, make_context(config, remote=[key])) is True


def test_plain_variant_of_gzip_eligible_asset_is_diffed(add_asset, make_config):
    config = make_config(gzip=True)
    path = add_asset("assets/app.js")
    key = "static/assets/plain/app.js"
    assert should_upload(key, path, Variant.PLAIN, make_context(config, remote=[key])) is False


def test_stylesheet_forced_while_images_pending(add_asset, make_config):
    config = make_config(rewrite_css_path=True)
    path = add_asset("assets/site.css")
    key = "static/assets/plain/site.css"
    assert should_upload(key, path, Variant.PLAIN, make_context(config, remote=[key], pending=True)) is True
    assert should_upload(key, path, Variant.PLAIN, make_context(config, remote=[key], pending=False)) is False


def test_stylesheet_with_rewrite_disabled_is_diffed(add_asset, make_config):
    config = make_config(rewrite_css_path=False)
    path = add_asset("assets/app.css")
    key = "static/assets/plain/app.css"
    assert should_upload(key, path, Variant.PLAIN, make_context(config, remote=[key], pending=True)) is False


def test_existing_key_skipped_unless_forced(add_asset, make_config):
    config = make_config()
    path = add_asset("assets/app.js")
    key = "static/assets/plain/app.js"
    assert should_upload(key, path, Variant.PLAIN, make_context(config, remote=[key])) is False
    assert should_upload(key, path, Variant.PLAIN, make_context(config, remote=[key], force_write=True)) is True


def test_missing_key_uploaded(add_asset, make_config):
    path = add_asset("assets/app.js")
    assert should_upload("static/assets/plain/app.js", path, Variant.PLAIN, make_context(make_config())) is True


def test_images_pending(add_asset, make_config):
    config = make_config()
    logo = add_asset("assets/logo.png", b"img")
    css = add_asset("assets/app.css")
    plain_keys = {"static/logo.png": logo, "static/assets/plain/app.css": css}

    index = RemoteKeyIndex(InMemoryStorage(["static/logo.png"]), ["static/"])
    assert images_pending(plain_keys, index, config) is False

    # Missing non-images do not count
    index = RemoteKeyIndex(InMemoryStorage(), ["static/"])
    assert images_pending({"static/assets/plain/app.css": css}, index, config) is False
    assert images_pending(plain_keys, index, config) is True


def test_cdn_disabled_images_are_never_pending(add_asset, make_config):
    config = make_config(disable_cdn_for=["assets/admin/*"])
    bg = add_asset("assets/admin/bg.png", b"img")
    index = RemoteKeyIndex(InMemoryStorage(), ["static/"])
    assert images_pending({"static/admin/bg.png": bg}, index, config) is False
