from peewee import Model, CharField, CompositeKey, TextField
from infrastructure.peewee.session.db import db

class KeyValueModel(Model):
    namespace = CharField()
    key = CharField()
    value = TextField()

    class Meta:
        database = db
        table_name = "kv_entries"
        primary_key = CompositeKey("namespace", "key")
