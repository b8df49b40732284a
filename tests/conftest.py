import os

# The web application reads these when it's imported. Tests build
# their own gateway instead of one from a configuration file.
os.environ.setdefault("TESTING", "true")
os.environ["AUTOINITIALIZE"] = "False"
os.environ.pop("NCIP_CONFIGURATION_FILE", None)
