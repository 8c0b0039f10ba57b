#!/usr/bin/env python3
"""Abogadai console: log in, check quota, talk to the avatar, review and generate."""

import getpass
import logging

from .adapters.config_env import load_app_config
from .adapters.http_cases import HttpCasesApi
from .adapters.http_sessions import HttpSessionsApi
from .adapters.navigation import ConsoleNavigator
from .admin import AdminClient, count_refunds, filter_refunds
from .api_client import ApiClient, ApiError
from .async_bridge import AsyncBridge
from .auth_session import AuthSession
from .config import config
from .core.controller import SessionLifecycleController
from .core.state_machine import SessionPhase
from .limit_gate import Allowed, BlockedByLimit, LimitGate
from .refunds import RefundRequest, RefundValidationError, submit_refund
from .usage import EXTRA_SESSIONS_TIP, daily_usage_reader, tier_reader


class AbogadaiConsole:
    """Main application - menu loop over the REST backend"""

    def __init__(self):
        config.create_dirs()
        self.settings = load_app_config()
        self.bridge = AsyncBridge()
        self.auth = AuthSession(config.SESSION_FILE)
        self.navigator = ConsoleNavigator()
        self.client = ApiClient(
            self.settings.api_url,
            timeout=self.settings.http_timeout,
            token_provider=self.auth.get_token,
        )
        self.sessions = HttpSessionsApi(self.client)
        self.cases = HttpCasesApi(self.client)
        self.usage = daily_usage_reader(self.client, self.settings.usage_poll_interval)
        self.tier = tier_reader(self.client, self.settings.tier_poll_interval)
        self.admin = AdminClient(self.client)

    def _run(self, coro):
        return self.bridge.run_sync(coro)

    def login(self) -> bool:
        email = input("Email: ").strip()
        password = getpass.getpass("Contraseña: ")
        try:
            self._run(self.auth.login(self.client, email, password))
            user = self._run(self.auth.current_user(self.client))
        except ApiError as e:
            print(f"❌ {e.detail or 'No se pudo iniciar sesión'}")
            return False
        print(f"✓ Hola, {user.get('nombre', email)}")
        return True

    def show_usage(self):
        snapshot = self.usage.snapshot
        if snapshot is None:
            print(f"⚠ {self.usage.error or 'Cargando uso...'}")
        else:
            print(
                f"Sesiones: {snapshot.sessions_used}/{snapshot.sessions_available} "
                f"({snapshot.sessions_remaining} restantes) | "
                f"Minutos: {snapshot.minutes_used}/{snapshot.minutes_available}"
            )
            for warning in snapshot.warnings():
                print(f"⚠ {warning}")
            if self.usage.error:
                print(f"⚠ {self.usage.error} (mostrando últimos datos)")

        tier = self.tier.snapshot
        if tier is not None:
            print(f"Nivel: {tier.info.icon} {tier.info.name} ({tier.progress:.0f}% hacia {tier.next_level or '-'})")

    def new_session(self):
        result = self._run(LimitGate(self.sessions).check())
        if isinstance(result, BlockedByLimit):
            print(f"⛔ Límite alcanzado: {result.message}")
            if result.sessions_used is not None:
                print(f"   Sesiones usadas: {result.sessions_used} / {result.sessions_maximum}")
            print(f"💡 {EXTRA_SESSIONS_TIP}")
            return
        if not isinstance(result, Allowed):
            print(f"❌ {result.message}")
            return

        print(f"Sesiones disponibles hoy: {result.sessions_remaining}")
        print(f"Minutos disponibles hoy: {result.minutes_remaining} min")
        print(f"Duración máxima de esta sesión: {result.max_session_duration_minutes} minutos")
        if result.warn_sessions:
            print("⚠ Quedan pocas sesiones")
        if result.warn_minutes:
            print("⚠ Quedan pocos minutos")
        if input("¿Iniciar sesión? [s/N] ").strip().lower() != "s":
            return

        controller = SessionLifecycleController(
            self.sessions,
            self.cases,
            navigator=self.navigator,
            autosave_delay=self.settings.autosave_delay,
        )
        try:
            self._session_flow(controller)
        finally:
            self._run(controller.close())

    def _session_flow(self, controller: SessionLifecycleController):
        print("⏳ Preparando sesión...")
        if not self._run(controller.start_session()):
            print(f"❌ {controller.state.error}")
            return
        print(f"🎙 En sesión (caso {controller.state.case_id}) - sala {controller.state.room_url}")

        while controller.phase is SessionPhase.IN_SESSION:
            choice = input("Enter para finalizar, 'a' para abandonar: ").strip().lower()
            if choice == "a":
                self._run(controller.abandon())
                print("Sesión abandonada")
                return
            print("⏳ Procesando conversación...")
            if not self._run(controller.end_session()):
                print(f"❌ {controller.state.error}")

        self._review(controller)

    def _review(self, controller: SessionLifecycleController):
        revision = controller.revision
        print(f"📝 Revisión - {len(controller.state.conversation)} mensajes en la conversación")
        while controller.phase is SessionPhase.REVIEW:
            missing = revision.missing_labels()
            if missing:
                print(f"Faltan {len(missing)} campo(s): {', '.join(missing)}")
            else:
                print("✓ Listo para generar")
            command = input("campo=valor | g (generar) | q (salir): ").strip()
            if command == "q":
                self._run(controller.flush_autosave())
                return
            if command == "g":
                self._generate(controller)
                if controller.state.case_data.has_document:
                    return
                continue
            if "=" in command:
                key, value = command.split("=", 1)
                try:
                    self.bridge.call(lambda: controller.edit(**{key.strip(): value.strip()}))
                except ValueError as e:
                    print(f"⚠ {e}")

    def _generate(self, controller: SessionLifecycleController):
        summary = controller.request_generation()
        if summary is None:
            print(f"⚠ {controller.revision.error}")
            return
        print("Confirma tus datos:")
        for line in summary.lines():
            print(f"  {line}")
        if input("¿Confirmar y generar? [s/N] ").strip().lower() != "s":
            controller.cancel_generation()
            return
        if self._run(controller.confirm_generation()):
            print(f"✓ Documento generado ({self.navigator.current})")
        else:
            print(f"❌ {controller.revision.error}")

    def list_cases(self):
        for caso in self._run(self.cases.list_cases()):
            mark = "📄" if caso.has_document else "…"
            print(f"{mark} #{caso.id} {caso.tipo_documento} - {caso.entidad_accionada or 'sin entidad'} [{caso.estado}]")

    def request_refund(self):
        try:
            case_id = int(input("Caso: ").strip())
        except ValueError:
            print("⚠ Número de caso inválido")
            return
        reason = input("Motivo: ")
        evidence = input("Evidencia (ruta, opcional): ").strip() or None
        try:
            self._run(submit_refund(self.client, case_id, RefundRequest(reason, evidence)))
        except RefundValidationError as e:
            print(f"⚠ {e}")
            return
        except ApiError as e:
            print(f"❌ {e.detail or 'Error al solicitar el reembolso'}")
            return
        print("✓ Solicitud de reembolso enviada")

    def review_refunds(self):
        refunds = self._run(self.admin.list_refunds())
        counts = count_refunds(refunds)
        print(" | ".join(f"{name}: {count}" for name, count in counts.items()))
        for refund in filter_refunds(refunds, "pendientes"):
            print(f"#{refund.get('caso_id')} - {refund.get('motivo', '')}")
            choice = input("a) Aprobar  r) Rechazar  Enter) Omitir: ").strip().lower()
            if choice == "a":
                self._run(self.admin.approve_refund(refund["caso_id"]))
                print("✓ Reembolso aprobado")
            elif choice == "r":
                try:
                    self._run(self.admin.reject_refund(refund["caso_id"], input("Razón: ")))
                except ValueError as e:
                    print(f"⚠ {e}")
                    continue
                print("✓ Reembolso rechazado")

    def run(self):
        """Run the application"""
        print("\n" + "=" * 50)
        print("⚖️  Abogadai")
        print("=" * 50)
        print(f"Backend: {self.settings.api_url}")
        print("=" * 50 + "\n")

        self.bridge.start()
        self.auth.load()
        if not self.auth.is_authenticated and not self.login():
            self.shutdown()
            return

        self.bridge.call(self.usage.start)
        self.bridge.call(self.tier.start)

        actions = {
            "1": self.show_usage,
            "2": self.new_session,
            "3": self.list_cases,
            "4": self.request_refund,
        }
        menu = "1) Uso  2) Nueva sesión  3) Mis casos  4) Reembolso"
        if self.auth.is_admin:
            actions["5"] = self.review_refunds
            menu += "  5) Revisar reembolsos"
        try:
            while True:
                choice = input(f"\n{menu}  s) Salir  q) Cerrar sesión\n> ")
                choice = choice.strip().lower()
                if choice == "q":
                    self.auth.logout()
                    break
                if choice == "s":
                    break
                action = actions.get(choice)
                if action is None:
                    continue
                try:
                    action()
                except ApiError as e:
                    print(f"❌ {e.detail or e.message}")
        except (KeyboardInterrupt, EOFError):
            pass

        self.shutdown()

    def shutdown(self):
        """Clean shutdown"""
        print("\nShutting down...")
        if self.bridge.is_running:
            self.bridge.call(self.usage.stop)
            self.bridge.call(self.tier.stop)
            self._run(self.client.aclose())
        self.bridge.stop()
        print("✓ Done")


def main():
    logging.basicConfig(
        level=logging.DEBUG if config.DEBUG else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    AbogadaiConsole().run()


if __name__ == "__main__":
    main()
