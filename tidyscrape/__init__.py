"""tidyscrape: fetch HTML, select nodes, and normalize them into tidy records."""

import logging

__version__ = "0.1.0"

# Stay silent unless the application configures logging (see tidyscrape.log).
logging.getLogger(__name__).addHandler(logging.NullHandler())
