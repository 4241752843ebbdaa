"""Command orchestration for the CLI.

This module provides the SyncCommand class behind the `push`, `pull` and
`tree` commands. It wires the site reader and writer, the engine client and
the sync engines together, reports progress through the OutputHandler and
translates exceptions to exit codes.
"""

import logging
import os
from typing import Callable, Optional

from src.cli.errors import CLIError, SitePathNotFoundError
from src.cli.models import ExitCode, PushSummary
from src.cli.output import OutputHandler
from src.engine_client.api_wrapper import APIWrapper
from src.engine_client.auth import Authenticator
from src.engine_client.errors import (
    APIAccessError,
    APIUnreachableError,
    EngineError,
    InvalidCredentialsError,
)
from src.site_mapper.config_loader import ConfigLoader
from src.site_mapper.errors import SiteMapperError
from src.site_mapper.site_reader import SiteReader
from src.site_mapper.site_writer import SiteWriter
from src.sync.errors import LocaleMismatchError, PushError
from src.sync.ledger import SyncReport
from src.sync.pull_engine import PullEngine
from src.sync.push_engine import PushEngine, PushOptions

logger = logging.getLogger(__name__)


class SyncCommand:
    """Runs the mounter commands against one site directory.

    Example:
        >>> command = SyncCommand(output_handler=OutputHandler(verbosity=1))
        >>> exit_code = command.push('./my-site', env='production', options=PushOptions(data=True))
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        output_handler: Optional[OutputHandler] = None,
        api_factory: Optional[Callable[[Authenticator], APIWrapper]] = None,
    ):
        """Initialize the command.

        Args:
            output_handler: OutputHandler for terminal output (optional)
            api_factory: Builds the engine client from an Authenticator
                (optional, APIWrapper by default)
        """
        self.output_handler = output_handler or OutputHandler()
        self.api_factory = api_factory or APIWrapper

    def _api(self, site_path: str, env: str) -> APIWrapper:
        settings = ConfigLoader.load_deploy(site_path, env)
        if settings is None:
            logger.info(f"No '{env}' settings in deploy.yml, using environment variables")
        return self.api_factory(Authenticator(settings))

    def push(self, site_path: str, env: str = 'production', options: Optional[PushOptions] = None) -> ExitCode:
        """Push the site directory to the engine."""
        def run() -> ExitCode:
            if not os.path.isdir(site_path):
                raise SitePathNotFoundError(site_path)

            with self.output_handler.spinner(f"Reading site from {site_path}..."):
                mounting_point = SiteReader(site_path).read()
            for orphan in mounting_point.orphans:
                self.output_handler.warning(f"Page '{orphan.fullpath}' has no parent page and is not pushed")

            report = SyncReport(listener=self.output_handler.report_status)
            PushEngine(self._api(site_path, env), mounting_point, options, report).run()

            self.output_handler.print_push_summary(report)
            if PushSummary.from_report(report).has_failures:
                return ExitCode.RESOURCE_ERRORS
            return ExitCode.SUCCESS

        return self._run('push', run)

    def pull(self, site_path: str, env: str = 'production', data: bool = False) -> ExitCode:
        """Pull the remote site into the site directory."""
        def run() -> ExitCode:
            api = self._api(site_path, env)
            report = SyncReport(listener=self.output_handler.report_status)

            with self.output_handler.spinner("Fetching site from the engine..."):
                mounting_point = PullEngine(api, data=data, report=report).run()
            for orphan in mounting_point.orphans:
                self.output_handler.warning(f"Page '{orphan.fullpath}' has no parent page on the engine")

            writer = SiteWriter(mounting_point, site_path, api.download)
            with self.output_handler.spinner(f"Writing site to {site_path}..."):
                written = writer.write()

            self.output_handler.print_pull_summary(mounting_point, written, writer.failed_assets)
            if writer.failed_assets:
                return ExitCode.RESOURCE_ERRORS
            return ExitCode.SUCCESS

        return self._run('pull', run)

    def tree(self, site_path: str, locale: Optional[str] = None) -> ExitCode:
        """Print the page tree of the site directory."""
        def run() -> ExitCode:
            if not os.path.isdir(site_path):
                raise SitePathNotFoundError(site_path)

            mounting_point = SiteReader(site_path).read()
            if locale is not None and locale not in mounting_point.locales:
                raise CLIError(
                    f"Locale '{locale}' is not one of the site locales ({', '.join(mounting_point.locales)})"
                )
            self.output_handler.print_tree(mounting_point, locale)
            return ExitCode.SUCCESS

        return self._run('tree', run)

    def _run(self, command: str, action: Callable[[], ExitCode]) -> ExitCode:
        """Run `action` and translate exceptions to exit codes."""
        try:
            return action()

        except InvalidCredentialsError as e:
            logger.error(f"Authentication failed: {e}")
            self.output_handler.error(f"Authentication failed: {e}")
            self.output_handler.info(
                "Check config/deploy.yml or the MOUNTER_URI, MOUNTER_EMAIL and MOUNTER_API_KEY variables"
            )
            return ExitCode.AUTH_ERROR

        except (APIUnreachableError, APIAccessError) as e:
            logger.error(f"API error: {e}")
            self.output_handler.error(f"API error: {e}")
            self.output_handler.info("Check your internet connection and try again")
            return ExitCode.NETWORK_ERROR

        except LocaleMismatchError as e:
            logger.error(f"Locale mismatch: {e}")
            self.output_handler.error(str(e))
            return ExitCode.VALIDATION_ERROR

        except (SiteMapperError, CLIError) as e:
            logger.error(f"{command} failed: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except (PushError, EngineError) as e:
            logger.error(f"{command} aborted: {e}")
            self.output_handler.error(f"{command.capitalize()} aborted: {e}")
            return ExitCode.GENERAL_ERROR

        except ValueError as e:
            logger.error(f"Invalid option: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception(f"Unexpected error during {command}")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR
