"""Mortgage calculator — a service, two controllers, a template, static files.

Demonstrates service injection, the runtime context (settings and
rendering), path parameters, and the robots.txt alias.

Run:
    python app.py
"""

from dataclasses import replace
from pathlib import Path

from roost import App, AppConfig, ConfigurationService, RuntimeContext, controller, get, inject, service

HERE = Path(__file__).parent


@service
class LayoutService:
    context = inject(RuntimeContext)

    def home(self) -> str:
        return self.context.render(
            "index.html",
            {
                "title": "Hypothekenrechner",
                "production": self.context.settings.get_bool("server.isProduction"),
            },
        )


@service
class PaymentService:
    def monthly(self, principal: float, annual_rate: float, years: int) -> float:
        """Fixed monthly payment for a fully amortizing loan."""
        months = years * 12
        if months <= 0:
            raise ValueError("term must be at least one year")
        rate = annual_rate / 100 / 12
        if rate == 0:
            return principal / months
        return principal * rate / (1 - (1 + rate) ** -months)


@controller("/")
class HomeController:
    layout = inject(LayoutService)

    @get("/")
    def home(self) -> str:
        return self.layout.home()


@controller("/api")
class PaymentController:
    payments = inject(PaymentService)

    @get("/payment/{principal}/{rate}/{years}")
    def payment(self, params: dict[str, str]) -> str:
        amount = self.payments.monthly(
            float(params["principal"]), float(params["rate"]), int(params["years"])
        )
        return f"{amount:.2f}"


def build_app(settings: ConfigurationService) -> App:
    config = replace(
        AppConfig.from_provider(settings),
        template_dir=HERE / "templates",
        static_dir=HERE / "static",
    )
    return App(
        config,
        components=[LayoutService, PaymentService, HomeController, PaymentController],
        settings=settings,
    )


app = build_app(ConfigurationService.load(HERE / "application.yaml"))

if __name__ == "__main__":
    app.run()
