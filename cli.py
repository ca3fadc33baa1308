"""Herramientas de línea de comandos para la operación de la clínica."""

import click

from config import configure_logging
from core.exceptions import AppException
from database.db import create_tables
from dependencies import ServiceContext
from models.users import Role, UserCreate


@click.group()
def cli():
    """Pet Clinic CLI tools."""
    configure_logging()


@cli.command("send-reminders")
@click.option("--strategy", "strategies", multiple=True, help="Estrategia a usar (repetible); todas por defecto")
def send_reminders(strategies):
    """
    Envía recordatorios de las citas que empiezan dentro de la ventana configurada.

    Pensado para ejecutarse desde cron:
        python cli.py send-reminders --strategy email
    """
    try:
        with ServiceContext() as ctx:
            report = ctx.reminder_service.dispatch(strategy_names=list(strategies) or None)
    except AppException as e:
        raise click.ClickException(e.message)

    click.echo(f"✓ Citas procesadas: {report.appointments}")
    click.echo(f"  Enviados: {report.sent}  Fallidos: {report.failed}")
    for name, count in report.by_strategy.items():
        click.echo(f"  {name}: {count}")


@cli.command("create-admin")
@click.option("--username", required=True, help="Nombre de usuario")
@click.option("--full-name", required=True, help="Nombre completo")
@click.password_option(help="Contraseña (mínimo 6 caracteres)")
def create_admin(username: str, full_name: str, password: str):
    """
    Crea la primera cuenta de administrador.

    Example:
        python cli.py create-admin --username admin --full-name "Clinic Admin"
    """
    create_tables()
    try:
        with ServiceContext() as ctx:
            user = ctx.user_service.create_user(
                UserCreate(username=username, full_name=full_name, password=password, role=Role.admin)
            )
    except AppException as e:
        raise click.ClickException(e.message)

    click.echo(f"✓ Administrador creado: {user.username} (id {user.id})")


if __name__ == "__main__":
    cli()
