from polyclinic.core.composition.assembler import CompositionAssembler, ForeignField

__all__ = ["CompositionAssembler", "ForeignField"]
