# -*- test-case-name: rbdvolume.common.test.test_plugin -*-
# Copyright ClusterHQ Inc.  See LICENSE file for details.

"""
A registry of named volume drivers, with support for third-party drivers.
"""

from characteristic import attributes
from twisted.python.reflect import namedAny


@attributes(["driver_name"])
class DriverNotFound(Exception):
    """
    A driver with the given name was not found.

    :attr str driver_name: Name of the driver looked for.
    """
    def __str__(self):
        return (
            "'{!s}' is neither a registered driver nor a 3rd party "
            "module.".format(self.driver_name)
        )


@attributes(["driver_name"])
class DuplicateDriver(Exception):
    """
    A driver with the given name has already been registered.
    """
    def __str__(self):
        return "A driver named '{!s}' is already registered.".format(
            self.driver_name)


class InvalidDriver(Exception):
    """
    A module with the given driver name was found, but doesn't
    provide a valid volume driver.
    """


@attributes(["driver_name", "module_attribute"])
class MissingDriverAttribute(InvalidDriver):
    """
    The named module doesn't have the attribute expected of drivers.
    """
    def __str__(self):
        return (
            "The 3rd party driver '{driver_name!s}' does not "
            "correspond to the expected interface. "
            "`{driver_name!s}.{module_attribute!s}` is not defined."
            .format(
                driver_name=self.driver_name,
                module_attribute=self.module_attribute,
            )
        )


@attributes(["driver_name", "actual_type", "module_attribute"])
class InvalidDriverFactory(InvalidDriver):
    """
    The named module's driver attribute is not callable.
    """
    def __str__(self):
        return (
            "The 3rd party driver '{driver_name!s}' does not "
            "correspond to the expected interface. "
            "`{driver_name!s}.{module_attribute!s}` is of "
            "type `{actual_type.__name__}`, which is not callable."
            .format(
                driver_name=self.driver_name,
                actual_type=self.actual_type,
                module_attribute=self.module_attribute,
            )
        )


@attributes(["driver_name", "interface"])
class InvalidDriverInstance(InvalidDriver):
    """
    A driver factory returned an object which does not provide the driver
    interface.
    """
    def __str__(self):
        return (
            "The factory for driver '{driver_name!s}' returned an object "
            "which does not provide `{interface_name}`.".format(
                driver_name=self.driver_name,
                interface_name=self.interface.getName(),
            )
        )


class DriverRegistry(object):
    """
    A mapping of driver names to driver factories.

    The host process creates one of these during its own initialization and
    registers every driver it wants to dispatch to before any volume
    operation is performed.

    :ivar interface: The ``zope.interface.Interface`` that objects returned by
        driver factories must provide, or ``None`` to skip the check.
    :ivar str module_attribute: The module attribute that third-party drivers
        should declare.
    """
    def __init__(self, interface=None,
                 module_attribute="VOLUME_DRIVER_FACTORY"):
        self.interface = interface
        self.module_attribute = module_attribute
        self._factories = {}

    def register(self, name, factory):
        """
        Bind ``name`` to ``factory``.

        :param str name: The name the host framework will use to refer to
            the driver.
        :param factory: A no-argument callable returning a driver instance.

        :raise DuplicateDriver: If ``name`` is already registered.
        """
        if name in self._factories:
            raise DuplicateDriver(driver_name=name)
        self._factories[name] = factory

    def names(self):
        """
        :return: A sorted ``list`` of the registered driver names.

        .. note::

           This list does not include third-party drivers which have only
           been looked up by import path.
        """
        return sorted(self._factories)

    def get(self, name):
        """
        Find the factory registered under ``name``. If there is none then an
        attempt is made to load ``name`` as a module describing a driver.

        :param str name: The name of the driver.

        :raise DriverNotFound: If ``name`` doesn't match any known driver.
        :raise InvalidDriver: If ``name`` names a module that doesn't satisfy
            the driver interface.
        :return: The driver factory.
        """
        try:
            return self._factories[name]
        except KeyError:
            pass

        try:
            driver_module = namedAny(name)
        except (AttributeError, ValueError, ImportError):
            raise DriverNotFound(driver_name=name)

        try:
            factory = getattr(driver_module, self.module_attribute)
        except AttributeError:
            raise MissingDriverAttribute(
                driver_name=name,
                module_attribute=self.module_attribute,
            )

        if not callable(factory):
            raise InvalidDriverFactory(
                driver_name=name,
                actual_type=type(factory),
                module_attribute=self.module_attribute,
            )

        return factory

    def create(self, name):
        """
        Construct a new instance of the driver named ``name``.

        :param str name: The name of the driver.

        :raise InvalidDriverInstance: If the factory returns something which
            does not provide ``interface``.
        :return: The driver.
        """
        driver = self.get(name)()
        if (self.interface is not None and
                not self.interface.providedBy(driver)):
            raise InvalidDriverInstance(
                driver_name=name, interface=self.interface,
            )
        return driver
