from kaleereads.utils.decorators import role_required

__all__ = ['role_required']
