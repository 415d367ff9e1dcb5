import os
import tempfile

# Las sesiones de Peewee y SQLAlchemy leen DATABASE_URL al importarse,
# así que se fija antes de que cualquier test importe infraestructura.
_tmp_dir = tempfile.mkdtemp(prefix="task-server-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'kv.db')}"
os.environ.setdefault("STORAGE_BACKEND", "memory")
