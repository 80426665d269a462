import os
import tempfile

# Must run before any tvboard module reads its configuration.
_scratch = tempfile.mkdtemp(prefix="tvboard-tests-")
os.environ["SIGNAGE_DATABASE_URL"] = "sqlite://"
os.environ["SIGNAGE_IMAGE_DIR"] = os.path.join(_scratch, "images")
os.environ["SIGNAGE_PUBLIC_DIR"] = os.path.join(_scratch, "public")
os.environ["SIGNAGE_API_KEY"] = ""
os.environ["SIGNAGE_LOG_LEVEL"] = "WARNING"
