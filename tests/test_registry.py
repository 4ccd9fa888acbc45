import doorsync


def test_basics():

    registry = doorsync.registry.SessionRegistry()

    assert registry.is_empty()
    assert len(registry) == 0
    assert registry.all() == ()

    registry.add('s1')
    registry.add('s2')

    assert not registry.is_empty()
    assert registry.contains('s1')
    assert 's2' in registry
    assert not registry.contains('s3')
    assert registry.all() == ('s1', 's2')


def test_add_is_idempotent():

    registry = doorsync.registry.SessionRegistry()

    registry.add('s1')
    registry.add('s2')
    registry.add('s1')

    assert registry.all() == ('s1', 's2')
    assert len(registry) == 2


def test_remove():

    registry = doorsync.registry.SessionRegistry(('s1', 's2', 's3'))

    registry.remove('s2')
    assert registry.all() == ('s1', 's3')

    # Removing something that is not present is a no-op.

    registry.remove('s2')
    registry.remove('never-added')
    assert registry.all() == ('s1', 's3')

    registry.remove('s1')
    registry.remove('s3')
    assert registry.is_empty()


def test_insertion_order():

    registry = doorsync.registry.SessionRegistry()

    for session in ('c', 'a', 'b'):
        registry.add(session)

    assert list(registry) == ['c', 'a', 'b']

    # Re-adding after a removal moves the session to the end.

    registry.remove('c')
    registry.add('c')
    assert registry.all() == ('a', 'b', 'c')


def test_iteration_is_a_snapshot():

    registry = doorsync.registry.SessionRegistry(('s1', 's2'))

    for session in registry:
        registry.remove(session)

    assert registry.is_empty()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
