"""
Upload templates — the input schema expected for each movement kind.

Column names match the headers parsing.read_batch() looks for.
"""

from dataclasses import dataclass, field

from stockflow.conf import stockflow_settings
from stockflow.models.enums import MovementKind


@dataclass(frozen=True)
class TemplateColumn:
    name: str
    required: bool
    description: str
    choices: tuple[str, ...] = ()


@dataclass(frozen=True)
class TemplateSpec:
    """Ordered columns of an upload template."""

    kind: MovementKind
    columns: tuple[TemplateColumn, ...] = field(default_factory=tuple)

    @property
    def headers(self) -> list[str]:
        return [column.name for column in self.columns]

    @property
    def required(self) -> list[str]:
        return [column.name for column in self.columns if column.required]

    def as_dict(self) -> dict:
        return {
            'kind': str(self.kind),
            'columns': [
                {
                    'name': column.name,
                    'required': column.required,
                    'description': column.description,
                    'choices': list(column.choices),
                }
                for column in self.columns
            ],
        }


SKU_COLUMN = TemplateColumn('SKU', True, 'Catalog SKU of the product')


def template_for(kind) -> TemplateSpec:
    """
    Describe the upload template for a movement kind.

    Raises:
        StockflowError('INVALID_KIND'): Unknown kind
    """
    kind = MovementKind.coerce(kind)

    if kind == MovementKind.INBOUND:
        columns = (
            SKU_COLUMN,
            TemplateColumn('Quantity', True, 'Units received'),
        )
    elif kind == MovementKind.OUTBOUND:
        columns = (
            SKU_COLUMN,
            TemplateColumn('Quantity', True, 'Units dispatched'),
        )
    elif kind == MovementKind.RETURN:
        columns = (
            SKU_COLUMN,
            TemplateColumn('Quantity', True, 'Units returned'),
            TemplateColumn(
                'Reason', False, 'Why the items came back',
                tuple(stockflow_settings.RETURN_REASONS),
            ),
            TemplateColumn(
                'Condition', False, 'State of the returned items',
                tuple(stockflow_settings.CONDITIONS),
            ),
        )
    else:
        raise AssertionError(f"Unhandled movement kind: {kind}")

    return TemplateSpec(kind=kind, columns=columns)
