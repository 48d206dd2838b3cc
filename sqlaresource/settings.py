import logging
import os
import sys


class Settings:
    """Configuration defaults, can be overridden in the flask app.config
    :param DEFAULT_PAGE_SIZE: number of records returned in a list response
    :param MAX_PAGE_SIZE: upper bound for the pageSize request parameter
    :param MAX_PAGE_OFFSET: upper bound for the query offset
    :param LOGLEVEL: loglevel configuration variable, values from logging module (0: trace, .. 50: critical)
    """

    # Configuration settings are stored as class variables
    DEFAULT_PAGE_SIZE = 100
    MAX_PAGE_SIZE = 100
    # upper bound for the offset sent to the database
    MAX_PAGE_OFFSET = 2**31
    LOGLEVEL = logging.WARNING
    # first argument is the path passed to serve(), second argument the url id parameter name
    RESOURCE_URL_FMT = "{}"
    INSTANCE_URL_FMT = "{}/<{}>"
    # endpoint naming: serve() path, operation name
    ENDPOINT_FMT = "{}_{}"
    ID_PARAM = "id"
    # link header pagination parameters
    PAGE_PARAM = "p"
    PAGE_SIZE_PARAM = "pageSize"

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        Records are written to stderr
        """
        log = logging.getLogger("sqlaresource")
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

Settings.LOGLEVEL = LOGLEVEL
log = Settings.init_logging(LOGLEVEL)
