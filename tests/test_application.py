"""Tests for the host application."""

import pytest

from hotspring import Application, create_app, create_plugin
from hotspring.core.middleware import MiddlewareStack
from hotspring.core.router import Router
from hotspring.plugins import ConfigValidationError, HostApplication, create_config_schema


def handler(request):
    return None


@pytest.fixture
def app(logger):
    return Application("shop", logger=logger)


class TestApplication:

    def test_implements_host_interface(self, app):
        assert isinstance(app, HostApplication)
        assert app.plugins.app is app

    def test_managers_not_shared(self, logger):
        first = Application("one", logger=logger)
        second = Application("two", logger=logger)

        first.use(create_plugin("email", "1.0.0"))

        assert "email" in first.plugins
        assert "email" not in second.plugins

    def test_use_reads_plugin_section(self, logger):
        app = Application(
            "shop",
            logger=logger,
            config={"plugins": {"email": {"from": "shop@example.com"}}},
        )

        loaded = app.use(create_plugin("email", "1.0.0", default_config={"provider": "smtp"}))

        assert loaded.config == {"provider": "smtp", "from": "shop@example.com"}

    def test_explicit_config_wins_over_section(self, logger):
        app = Application("shop", logger=logger, config={"plugins": {"email": {"a": 1}}})

        loaded = app.use(create_plugin("email", "1.0.0"), {"b": 2})

        assert loaded.config == {"b": 2}

    def test_section_config_is_validated(self, logger):
        schema = create_config_schema({"port": {"type": "number"}})
        app = Application(
            "shop", logger=logger, config={"plugins": {"email": {"port": "25"}}}
        )

        with pytest.raises(ConfigValidationError):
            app.use(create_plugin("email", "1.0.0", config_schema=schema))

    @pytest.mark.asyncio
    async def test_lifespan(self, app):
        calls = []

        async def init(context):
            calls.append("init")

        async def setup(context):
            calls.append("setup")

        async def teardown(context):
            calls.append("teardown")

        @app.on_startup
        async def started():
            calls.append("startup")

        @app.on_shutdown
        async def stopping():
            calls.append("shutdown")

        app.use(create_plugin(
            "shop", "1.0.0", init=init, setup=setup, teardown=teardown,
            routes=[{"path": "/cart", "method": "GET", "handler": handler}],
            middleware=[{"handler": handler, "path": "/cart"}],
        ))

        async with app.lifespan() as running:
            assert running is app
            assert app.state.is_running
            assert app.plugins.is_loaded("shop")

        assert calls == ["init", "setup", "startup", "shutdown", "teardown"]
        assert not app.state.is_running
        assert not app.plugins.is_loaded("shop")
        assert [(r.method, r.path) for r in app.router.routes()] == [("GET", "/cart")]
        assert [e.path for e in app.middleware] == ["/cart"]

    @pytest.mark.asyncio
    async def test_startup_failure_propagates(self, app):
        app.use(create_plugin(
            "bad", "1.0.0",
            routes=[{"path": "/x", "method": "TRACE", "handler": handler}],
        ))

        with pytest.raises(Exception, match="Unsupported HTTP method: TRACE"):
            await app.startup()

        assert not app.state.is_running

    def test_create_app(self, logger):
        app = create_app("factory", debug=True, logger=logger)

        assert app.name == "factory"
        assert app.state.is_debug


class TestRouter:

    def test_add_and_list(self):
        router = Router()
        router.add("get", "/a", handler, name="a")
        router.add("POST", "/a", handler)

        @router.delete("/a")
        def remove(request):
            return None

        assert [(r.method, r.path) for r in router.routes()] == [
            ("GET", "/a"), ("POST", "/a"), ("DELETE", "/a"),
        ]
        assert router.routes("post")[0].handler is handler
        assert router.named("a").method == "GET"
        assert len(router) == 3

    def test_duplicates_kept(self):
        router = Router()
        router.add("GET", "/a", handler)
        router.add("GET", "/a", handler)

        assert len(router.routes("GET")) == 2

    def test_bad_method(self):
        with pytest.raises(ValueError):
            Router().add("FETCH", "/a", handler)

    def test_unknown_name(self):
        with pytest.raises(KeyError):
            Router().named("missing")


class TestMiddlewareStack:

    def test_for_path(self):
        def auth(request, call_next):
            return call_next(request)

        stack = MiddlewareStack()
        stack.add(handler).add(auth, path="/admin/*")

        assert [e.name for e in stack.for_path("/admin/users")] == ["handler", "auth"]
        assert [e.name for e in stack.for_path("/shop")] == ["handler"]

    def test_remove(self):
        stack = MiddlewareStack()
        stack.add(handler, name="timing")

        assert stack.remove("timing")
        assert not stack.remove("timing")
        assert len(stack) == 0
