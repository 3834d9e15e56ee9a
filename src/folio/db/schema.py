# ABOUTME: SQL DDL statements for the Folio catalog database schema.
# ABOUTME: Defines the books table, its unique ISBN index, and schema versioning.

SCHEMA_VERSION = 1

SCHEMA_V1 = """
-- Core book catalog table. Deletes are hard deletes, so every row is active.
CREATE TABLE books (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    title               TEXT NOT NULL,
    isbn                TEXT NOT NULL,
    genre               TEXT NOT NULL DEFAULT 'Other',
    author              TEXT NOT NULL,
    publisher           TEXT NOT NULL DEFAULT 'Other',
    synopsis            TEXT NOT NULL,
    summary             TEXT,
    photo_bytes         BLOB,
    photo_content_type  TEXT,
    cover_url           TEXT,
    owner_id            TEXT NOT NULL,
    created_at          TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    updated_at          TEXT,
    CHECK ((photo_bytes IS NULL) = (photo_content_type IS NULL))
);

-- One record per normalized ISBN; enforced by the store so racing inserts fail.
CREATE UNIQUE INDEX idx_books_isbn ON books(isbn);
CREATE INDEX idx_books_owner ON books(owner_id);
CREATE INDEX idx_books_genre ON books(genre);

-- Owner is fixed at creation.
CREATE TRIGGER books_owner_immutable BEFORE UPDATE OF owner_id ON books
WHEN new.owner_id IS NOT old.owner_id
BEGIN
    SELECT RAISE(ABORT, 'owner_id is immutable');
END;

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""
