"""Main CLI entry point for vglink.

vglink keeps a Vault token in a CI/CD variable of every GitLab project it
can see. The ``run`` command is the daemon; the other commands help write
and check the policy file that decides which token each project receives.
"""

import logging
import signal
import threading
from typing import Optional

import click
import yaml

from vglink import __version__
from vglink.utils.errors import ConfigurationError, ErrorHandler, format_validation_errors
from vglink.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--log-file", help="Log to file in addition to console")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_file: Optional[str]) -> None:
    """vglink - rotate Vault tokens into GitLab CI/CD variables."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["error_handler"] = ErrorHandler(verbose=verbose)

    setup_logging(verbose=verbose, log_file=log_file)


@cli.command()
@click.argument("path", required=False)
@click.option("--build-key", default="VAULT_TOKEN", help="CI/CD variable for the default policy")
@click.option("--renew-period", default="1h", help="Renewal period for the default policy")
@click.option("--policy", "policies", multiple=True, help="Vault policy for issued tokens (repeatable)")
@click.option("--ttl", default="2h", help="TTL of issued tokens")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_context
def init(
    ctx: click.Context,
    path: Optional[str],
    build_key: str,
    renew_period: str,
    policies: tuple,
    ttl: str,
    force: bool,
) -> None:
    """Write a starter policy file (default: ./vglink.yml)."""
    from vglink.config import ConfigManager

    try:
        config_path = ConfigManager().initialize_policy(
            path,
            force=force,
            build_key=build_key,
            renew_period=renew_period,
            policies=list(policies) or None,
            ttl=ttl,
        )
        click.echo(f"✓ Policy written to {config_path}")
    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, context="Writing policy file")


@cli.command()
@click.option("--config", "config_path", help="Policy file (default: $VGL_CONFIG_PATH or ./vglink.yml)")
@click.pass_context
def validate(ctx: click.Context, config_path: Optional[str]) -> None:
    """Check that the policy file loads and every level resolves."""
    from vglink.config import ConfigManager

    try:
        resolver = ConfigManager().load_policy(config_path)
    except ConfigurationError as e:
        errors = getattr(e, "errors", None)
        if errors:
            click.echo(format_validation_errors(errors), err=True)
            ctx.exit(1)
        ctx.obj["error_handler"].exit_with_error(e, context="Validating policy")
        return

    default = resolver.tree.default.repository_spec
    click.echo("✓ Policy is valid")
    click.echo(f"  Default: {default.build_key} every {default.renew_period}")
    click.echo(f"  Groups: {', '.join(resolver.group_names) or '(none)'}")


@cli.command()
@click.argument("project_path")
@click.option("--config", "config_path", help="Policy file (default: $VGL_CONFIG_PATH or ./vglink.yml)")
@click.pass_context
def resolve(ctx: click.Context, project_path: str, config_path: Optional[str]) -> None:
    """Show the effective policy for PROJECT_PATH (group/project)."""
    from vglink.config import ConfigManager

    try:
        link = ConfigManager().load_policy(config_path).resolve(project_path)
    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, context=f"Resolving {project_path}")
        return

    click.echo(yaml.safe_dump(link.to_dict(), default_flow_style=False, sort_keys=False), nl=False)


@cli.command()
@click.option("--config", "config_path", help="Policy file (default: $VGL_CONFIG_PATH or ./vglink.yml)")
@click.option("--interval", help="Time between discovery passes (default: $VGL_DISCOVERY_INTERVAL or 5m)")
@click.option("--once", is_flag=True, help="Run a single discovery pass and exit")
@click.pass_context
def run(ctx: click.Context, config_path: Optional[str], interval: Optional[str], once: bool) -> None:
    """Start the renewal daemon."""
    from vglink.clients import GitLabPlatform, VaultTokenIssuer
    from vglink.config import ConfigManager, Settings
    from vglink.policy import format_duration, parse_positive_duration
    from vglink.renewal import DiscoveryLoop, RenewalScheduler

    try:
        settings = Settings.from_env()
        settings.require_credentials()
        resolver = ConfigManager().load_policy(config_path or settings.config_path)

        discovery_interval = settings.discovery_interval
        if interval:
            try:
                discovery_interval = parse_positive_duration(interval)
            except ValueError as e:
                raise click.BadParameter(str(e), param_hint="--interval") from e

        platform = GitLabPlatform(
            settings.gitlab_base_url,
            settings.gitlab_token,
            timeout=settings.request_timeout,
        )
        issuer = VaultTokenIssuer(
            settings.vault_addr,
            settings.vault_token,
            namespace=settings.vault_namespace,
            verify=not settings.vault_skip_verify,
            timeout=settings.request_timeout,
        )
    except click.BadParameter:
        raise
    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, context="Starting vglink")
        return

    scheduler = RenewalScheduler()
    loop = DiscoveryLoop(resolver, scheduler, platform, issuer)

    if once:
        result = loop.tick()
        scheduler.shutdown()
        click.echo(
            f"Discovery: {result.projects_seen} project(s) seen, "
            f"{result.scheduled} synced, {result.disabled} disabled"
        )
        if result.aborted or result.initial_sync_failures:
            ctx.exit(1)
        return

    stop_event = threading.Event()

    def _stop(signum, frame):
        logger.info("Received signal %s, stopping", signum)
        stop_event.set()

    signal.signal(signal.SIGTERM, _stop)
    signal.signal(signal.SIGINT, _stop)

    logger.info(
        "vglink %s started: GitLab %s, Vault %s, discovery every %s",
        __version__,
        settings.gitlab_base_url,
        settings.vault_addr,
        format_duration(discovery_interval),
    )
    try:
        loop.run_forever(discovery_interval, stop_event)
    finally:
        scheduler.shutdown()


if __name__ == "__main__":
    cli()
