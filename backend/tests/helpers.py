"""Shared constants and fakes for the endpoints generator tests."""
from crudgen import Action

JWT_SECRET = 'test-secret'

SAMPLE_ENTITIES = {
    'categories': 'categories',
    'comments': 'comments',
    'products': 'products',
    'users': 'users',
}

VALID_DB_ADAPTATION = {
    Action.FIND_MANY: 'find',
    Action.FIND_BY_ID: 'find_by_id',
    Action.CREATE_ONE: 'create_new_for',
    Action.UPDATE_ONE: 'update_for',
    Action.DELETE_ONE: 'delete_for',
    Action.SAVE: 'save',
}


class InMemoryStore:
    """Capability object matching VALID_DB_ADAPTATION method names."""

    def __init__(self, rows=None, identifier_field='id'):
        self.identifier_field = identifier_field
        self.rows = {str(r[identifier_field]): dict(r) for r in (rows or [])}
        self.deleted_with = None

    def find(self, filters=None, limit=None, offset=0):
        rows = [r for r in self.rows.values() if all(str(r.get(k)) == v for k, v in (filters or {}).items())]
        return rows[offset:offset + limit] if limit is not None else rows[offset:]

    def find_by_id(self, identifier):
        return self.rows.get(str(identifier))

    def create_new_for(self, data):
        record = dict(data)
        record.setdefault(self.identifier_field, str(len(self.rows) + 1))
        self.rows[str(record[self.identifier_field])] = record
        return record

    def update_for(self, identifier, data):
        record = self.rows.get(str(identifier))
        if record is None:
            return None
        record.update({k: v for k, v in data.items() if k != self.identifier_field})
        return record

    def delete_for(self, identifier, dependents=()):
        self.deleted_with = list(dependents)
        return self.rows.pop(str(identifier), None)

    def save(self, data):
        identifier = data.get(self.identifier_field)
        if identifier is not None and str(identifier) in self.rows:
            return self.update_for(identifier, data)
        return self.create_new_for(data)


