"""Initial gate security schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from pgvector.sqlalchemy import Vector

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

EMBEDDING_DIMENSION = 512

# Columns covered by trigram indexes for operator search
TRIGRAM_COLUMNS = ['name', 'first_name', 'last_name', 'alias', 'phone', 'id_proof_number', 'id_number', 'address']


def _enum(name, *values):
    return sa.Enum(*values, name=name, native_enum=False, create_constraint=True, length=50)


def _id():
    return sa.Column('id', sa.String(255), primary_key=True)


def _person_fk(ondelete='CASCADE'):
    return sa.Column(
        'person_id', sa.String(255),
        sa.ForeignKey('persons.id', ondelete=ondelete),
        nullable=False,
    )


def _created_at():
    return sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()'))


def _updated_at():
    return sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('now()'))


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS vector')
    op.execute('CREATE EXTENSION IF NOT EXISTS pg_trgm')

    # Topology
    op.create_table(
        'villages',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        _created_at(),
        _updated_at(),
    )
    op.create_index('ix_villages_name', 'villages', ['name'])

    op.create_table(
        'nodes',
        _id(),
        sa.Column('village_id', sa.String(255), sa.ForeignKey('villages.id'), nullable=False),
        sa.Column('node_name', sa.String(255), nullable=False),
        sa.Column('node_type', sa.String(50), nullable=True),
        sa.Column('location_description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        _updated_at(),
    )
    op.create_index('ix_nodes_village_id', 'nodes', ['village_id'])

    op.create_table(
        'devices',
        _id(),
        sa.Column('node_id', sa.String(255), sa.ForeignKey('nodes.id'), nullable=True),
        sa.Column('device_name', sa.String(255), nullable=False),
        sa.Column('device_type', _enum('device_type', 'mobile', 'tablet', 'admin', 'gate'), nullable=False),
        sa.Column('cert_fingerprint', sa.String(255), nullable=True, unique=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('operator_name', sa.String(255), nullable=True),
        sa.Column('last_seen_at', sa.DateTime(), nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index('ix_devices_node_id', 'devices', ['node_id'])
    op.create_index('ix_devices_device_type', 'devices', ['device_type'])

    # Persons
    op.create_table(
        'persons',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(255), nullable=True),
        sa.Column('last_name', sa.String(255), nullable=True),
        sa.Column('alias', sa.String(255), nullable=True),
        sa.Column('gender', _enum('gender', 'MALE', 'FEMALE', 'OTHER'), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('religion', sa.String(100), nullable=True),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('contact_number', sa.String(50), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column(
            'id_proof_type',
            _enum('id_proof_type', 'AADHAR', 'PAN', 'DL', 'VOTER_ID', 'PASSPORT'),
            nullable=True,
        ),
        sa.Column('id_proof_number', sa.String(100), nullable=True),
        sa.Column('id_type', sa.String(50), nullable=True),
        sa.Column('id_number', sa.String(100), nullable=True),
        sa.Column(
            'category',
            _enum('person_category', 'resident', 'visitor', 'staff', 'guest'),
            nullable=False,
        ),
        sa.Column(
            'status',
            _enum('person_status', 'active', 'deactivated'),
            nullable=False,
            server_default='active',
        ),
        sa.Column('village_id', sa.String(255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('thumbnail_url', sa.Text(), nullable=True),
        sa.Column('last_verified_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.BigInteger(), nullable=False, server_default='0'),
        _created_at(),
        _updated_at(),
    )
    op.create_index('ix_persons_phone', 'persons', ['phone'])
    op.create_index('ix_persons_category', 'persons', ['category'])
    op.create_index('ix_persons_status', 'persons', ['status'])
    op.create_index('ix_persons_village_id', 'persons', ['village_id'])
    op.create_index('ix_persons_last_verified_at', 'persons', ['last_verified_at'])
    for column in TRIGRAM_COLUMNS:
        op.create_index(
            f'ix_persons_{column}_trgm', 'persons', [column],
            postgresql_using='gin',
            postgresql_ops={column: 'gin_trgm_ops'},
        )

    op.create_table(
        'person_relationships',
        _id(),
        _person_fk(),
        sa.Column(
            'related_person_id', sa.String(255),
            sa.ForeignKey('persons.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('related_person_name', sa.String(255), nullable=True),
        sa.Column(
            'relationship_type',
            _enum('relationship_type', 'FATHER', 'MOTHER', 'SON', 'DAUGHTER',
                  'BROTHER', 'SISTER', 'SPOUSE', 'FRIEND', 'OTHER'),
            nullable=False,
        ),
        _created_at(),
        sa.UniqueConstraint('person_id', 'related_person_id', 'relationship_type', name='uq_person_relationship_edge'),
    )
    op.create_index('ix_person_relationships_person_id', 'person_relationships', ['person_id'])
    op.create_index('ix_person_relationships_related_person_id', 'person_relationships', ['related_person_id'])
    op.create_index('ix_person_relationships_created_at', 'person_relationships', ['created_at'])

    op.create_table(
        'person_vehicles',
        _id(),
        _person_fk(),
        sa.Column('vehicle_type', _enum('vehicle_type', 'CAR', 'BIKE', 'SCOOTER', 'TRUCK', 'OTHER'), nullable=False),
        sa.Column('vehicle_number', sa.String(100), nullable=False),
        sa.Column('make_model', sa.String(255), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index('ix_person_vehicles_person_id', 'person_vehicles', ['person_id'])
    op.create_index('ix_person_vehicles_created_at', 'person_vehicles', ['created_at'])

    op.create_table(
        'person_photos',
        _id(),
        _person_fk(),
        sa.Column('photo_url', sa.Text(), nullable=False),
        sa.Column('photo_type', _enum('photo_type', 'front', 'side', 'back', 'other'), nullable=False),
        _created_at(),
    )
    op.create_index('ix_person_photos_person_id', 'person_photos', ['person_id'])
    op.create_index('ix_person_photos_created_at', 'person_photos', ['created_at'])

    op.create_table(
        'person_social_media',
        _id(),
        _person_fk(),
        sa.Column('platform', sa.String(100), nullable=False),
        sa.Column('account_id', sa.String(255), nullable=False),
        _created_at(),
        sa.UniqueConstraint('person_id', 'platform', 'account_id', name='uq_person_social_media_account'),
    )
    op.create_index('ix_person_social_media_person_id', 'person_social_media', ['person_id'])
    op.create_index('ix_person_social_media_created_at', 'person_social_media', ['created_at'])

    op.create_table(
        'person_education',
        _id(),
        _person_fk(),
        sa.Column('qualification', sa.String(255), nullable=True),
        sa.Column('institution', sa.String(255), nullable=True),
        sa.Column('education_info', sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index('ix_person_education_person_id', 'person_education', ['person_id'])
    op.create_index('ix_person_education_created_at', 'person_education', ['created_at'])

    op.create_table(
        'person_professional',
        _id(),
        _person_fk(),
        sa.Column('profession', sa.String(255), nullable=True),
        sa.Column('profession_description', sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index('ix_person_professional_person_id', 'person_professional', ['person_id'])
    op.create_index('ix_person_professional_created_at', 'person_professional', ['created_at'])

    op.create_table(
        'person_remarks',
        _id(),
        _person_fk(),
        sa.Column('content', sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index('ix_person_remarks_person_id', 'person_remarks', ['person_id'])
    op.create_index('ix_person_remarks_created_at', 'person_remarks', ['created_at'])

    op.create_table(
        'person_registration_movement',
        _id(),
        _person_fk(),
        sa.Column('movement_type', _enum('movement_type', 'ENTRY', 'EXIT'), nullable=False),
        _created_at(),
    )
    op.create_index('ix_person_registration_movement_person_id', 'person_registration_movement', ['person_id'])
    op.create_index('ix_person_registration_movement_created_at', 'person_registration_movement', ['created_at'])

    # Biometrics
    op.create_table(
        'person_face_embeddings',
        _id(),
        _person_fk(),
        sa.Column('embedding', Vector(EMBEDDING_DIMENSION), nullable=False),
        sa.Column('photo_id', sa.String(255), nullable=True),
        sa.Column('quality_score', sa.Float(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('enrolled_seq', sa.BigInteger(), nullable=False),
        _created_at(),
    )
    op.create_index('ix_person_face_embeddings_person_id', 'person_face_embeddings', ['person_id'])
    op.create_index('ix_person_face_embeddings_created_at', 'person_face_embeddings', ['created_at'])
    op.create_index('ix_person_face_embeddings_enrolled_seq', 'person_face_embeddings', ['enrolled_seq'])
    op.create_index('ix_person_face_embeddings_live', 'person_face_embeddings', ['person_id', 'is_deleted'])
    op.execute(
        'CREATE INDEX ix_person_face_embeddings_hnsw ON person_face_embeddings '
        'USING hnsw (embedding vector_l2_ops) WHERE NOT is_deleted'
    )

    op.create_table(
        'person_fingerprint_templates',
        _id(),
        _person_fk(),
        sa.Column('template', sa.LargeBinary(), nullable=False),
        sa.Column('finger_position', sa.String(50), nullable=True),
        sa.Column('quality_score', sa.Float(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('enrolled_seq', sa.BigInteger(), nullable=False),
        _created_at(),
    )
    op.create_index('ix_person_fingerprint_templates_person_id', 'person_fingerprint_templates', ['person_id'])
    op.create_index('ix_person_fingerprint_templates_created_at', 'person_fingerprint_templates', ['created_at'])
    op.create_index(
        'ix_person_fingerprint_templates_enrolled_seq', 'person_fingerprint_templates', ['enrolled_seq']
    )
    op.create_index('ix_person_fingerprint_templates_live', 'person_fingerprint_templates', ['person_id', 'is_deleted'])

    # Ledger
    op.create_table(
        'entry_logs',
        _id(),
        sa.Column('request_id', sa.String(255), nullable=True, unique=True),
        sa.Column('person_id', sa.String(255), sa.ForeignKey('persons.id'), nullable=False),
        sa.Column('person_name', sa.String(255), nullable=True),
        sa.Column('device_id', sa.String(255), sa.ForeignKey('devices.id'), nullable=False),
        sa.Column('biometric_method', _enum('biometric_method', 'face', 'fingerprint', 'manual'), nullable=False),
        sa.Column('match_type', _enum('match_type', 'mobile_auto', 'server_confirm', 'manual'), nullable=False),
        sa.Column('direction', _enum('direction', 'in', 'out'), nullable=False),
        sa.Column('confidence_score', sa.Float(), nullable=False, server_default='0'),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('vehicle_type', sa.String(50), nullable=True),
        sa.Column('vehicle_number', sa.String(50), nullable=True),
        sa.Column('vehicle_make_model', sa.String(255), nullable=True),
        sa.Column('vehicle_remarks', sa.Text(), nullable=True),
        sa.Column('is_synced', sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.CheckConstraint(
            'confidence_score >= 0 AND confidence_score <= 1',
            name='ck_entry_logs_confidence_range',
        ),
    )
    op.create_index('ix_entry_logs_person_id', 'entry_logs', ['person_id'])
    op.create_index('ix_entry_logs_device_id', 'entry_logs', ['device_id'])
    op.create_index('ix_entry_logs_biometric_method', 'entry_logs', ['biometric_method'])
    op.create_index('ix_entry_logs_direction', 'entry_logs', ['direction'])
    op.create_index('ix_entry_logs_timestamp', 'entry_logs', ['timestamp'])
    op.create_index('ix_entry_logs_created_at', 'entry_logs', ['created_at'])
    op.create_index('ix_entry_logs_person_timestamp', 'entry_logs', ['person_id', 'timestamp'])
    op.create_index('ix_entry_logs_device_timestamp', 'entry_logs', ['device_id', 'timestamp'])
    op.create_index('ix_entry_logs_is_synced', 'entry_logs', ['is_synced'])

    # Audit
    op.create_table(
        'person_audit',
        _id(),
        _person_fk(),
        sa.Column('action', _enum('audit_action', 'created', 'updated', 'deleted'), nullable=False),
        sa.Column('changed_fields', postgresql.JSONB(), nullable=True),
        sa.Column('changed_by', sa.String(255), nullable=True),
        sa.Column('old_version', sa.BigInteger(), nullable=False),
        sa.Column('new_version', sa.BigInteger(), nullable=False),
        _created_at(),
        sa.CheckConstraint('new_version = old_version + 1', name='ck_person_audit_version_step'),
    )
    op.create_index('ix_person_audit_person_id', 'person_audit', ['person_id'])
    op.create_index('ix_person_audit_created_at', 'person_audit', ['created_at'])


def downgrade() -> None:
    op.drop_table('person_audit')
    op.drop_table('entry_logs')
    op.drop_table('person_fingerprint_templates')
    op.drop_table('person_face_embeddings')
    op.drop_table('person_registration_movement')
    op.drop_table('person_remarks')
    op.drop_table('person_professional')
    op.drop_table('person_education')
    op.drop_table('person_social_media')
    op.drop_table('person_photos')
    op.drop_table('person_vehicles')
    op.drop_table('person_relationships')
    op.drop_table('persons')
    op.drop_table('devices')
    op.drop_table('nodes')
    op.drop_table('villages')
