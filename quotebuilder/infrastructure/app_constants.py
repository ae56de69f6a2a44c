APP_NAME = "Quotation Builder"
APP_VERSION = "0.4.0"
APP_TITLE = f"{APP_NAME} v{APP_VERSION}"

# Keep QSettings identifiers consistent to avoid breaking existing settings.
SETTINGS_ORG = "NeuronLogistics"
SETTINGS_APP = "QuotationBuilder"

BASE_CURRENCY = "PHP"
LOG_DIR = "logs"
LOG_FILE_STEM = "quotebuilder"
