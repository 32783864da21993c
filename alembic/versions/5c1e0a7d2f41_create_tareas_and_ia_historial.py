"""create_tareas_and_ia_historial

Revision ID: 5c1e0a7d2f41
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c1e0a7d2f41'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    # similarity() used to match corrections
    op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")

    op.create_table(
        'ric01',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('usuario', sa.String(100)),
        sa.Column('tarea', sa.Text()),
        sa.Column('fecha', sa.DateTime()),
        sa.Column('area', sa.String(100)),
        sa.Column('fin', sa.Boolean(), server_default=sa.false()),
        sa.Column('imagen', sa.Text(), nullable=True),
        sa.Column('fecha_comp', sa.DateTime(), nullable=True),
        sa.Column('fecha_fin', sa.DateTime(), nullable=True),
        sa.Column('solucion', sa.Text(), nullable=True),
        sa.Column('asignado', sa.String(100), nullable=True),
        sa.Column('servicio', sa.String(100), nullable=True),
        sa.Column('subservicio', sa.String(100), nullable=True),
        sa.Column('calificacion', sa.Integer(), nullable=True),
        sa.Column('reasignado_a', sa.String(100), nullable=True),
        sa.Column('reasignado_por', sa.String(100), nullable=True),
    )
    op.create_index('ix_ric01_id', 'ric01', ['id'])
    op.create_index('ix_ric01_area', 'ric01', ['area'])

    op.create_table(
        'areas',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('area', sa.String(100)),
    )
    op.create_index('ix_areas_id', 'areas', ['id'])
    op.create_index('ix_areas_area', 'areas', ['area'], unique=True)

    op.create_table(
        'servicios',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('servicio', sa.String(100)),
        sa.Column('subservicio', sa.String(100)),
        sa.Column('area', sa.String(100)),
    )
    op.create_index('ix_servicios_id', 'servicios', ['id'])

    op.create_table(
        'ia_historial',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('session_id', sa.Text(), nullable=False),
        sa.Column('pregunta', sa.Text(), nullable=False),
        sa.Column('respuesta', sa.Text(), nullable=True),
        sa.Column('correccion', sa.Text(), nullable=True),
        sa.Column('fecha', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_ia_historial_id', 'ia_historial', ['id'])
    op.create_index('ix_ia_historial_session_id', 'ia_historial', ['session_id'])
    op.execute(
        "CREATE INDEX ix_ia_historial_pregunta_trgm ON ia_historial USING gin (pregunta gin_trgm_ops)"
    )

def downgrade():
    op.drop_table('ia_historial')
    op.drop_table('servicios')
    op.drop_table('areas')
    op.drop_table('ric01')
