import logging
from typing import Iterable, Optional

from pylwrp.address import SIP_PREFIX, stream_num_to_address
from pylwrp.responses import DestinationResponse


class OutputStateCache:
    """Latest ``DST`` state of every output seen on the connection.

    An update replaces the whole entry for that output, attributes missing
    from the newer response are not carried over from the older one.
    """

    def __init__(self):
        self._logger = logging.getLogger(__name__)
        self._outputs: dict[int, DestinationResponse] = {}

    def __len__(self) -> int:
        return len(self._outputs)

    def __contains__(self, output_num: int) -> bool:
        return output_num in self._outputs

    @property
    def outputs(self) -> dict[int, DestinationResponse]:
        """Copy of the cached outputs by output number."""
        return dict(self._outputs)

    def get(self, output_num: int) -> Optional[DestinationResponse]:
        return self._outputs.get(output_num)

    def apply(self, responses: Iterable[DestinationResponse]) -> list[int]:
        """Store each response as the state of its output.

        Returns the output numbers that were updated, in order.
        """
        updated = []
        for response in responses:
            self._outputs[response.num] = response
            updated.append(response.num)
        return updated

    def clear(self):
        self._outputs.clear()

    def lookup(self, output_num: int) -> Optional[str]:
        """Return the source an output is carrying.

        This is the ``sip:`` descriptor or the multicast address. A bare
        stream number is converted to its multicast address. Returns None
        when the output is unknown or has no source.
        """
        output = self._outputs.get(output_num)
        if output is None:
            return None

        address = output.attributes.get("address")
        if not address:
            return None

        if address.startswith(SIP_PREFIX):
            return address

        if "." not in address:
            # Only the stream number was provided
            try:
                return stream_num_to_address(int(address))
            except ValueError:
                self._logger.warning(f"Output {output_num} has an invalid stream number: {address}")
                return address

        return address
